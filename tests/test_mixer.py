import pytest

from rsdkaudio.mixer import (
    CHANNEL_COUNT,
    MAX_VOLUME,
    SAMPLE_MAX,
    SAMPLE_MIN,
    Channel,
    Mixer,
    clamp_sample,
    mix_into,
)


def test_clamp_sample_limits():
    assert clamp_sample(40000) == 32767
    assert clamp_sample(-40000) == -32768
    assert clamp_sample(123) == 123
    assert clamp_sample(SAMPLE_MAX) == SAMPLE_MAX
    assert clamp_sample(SAMPLE_MIN) == SAMPLE_MIN


def test_mix_into_full_volume_adds_exactly():
    dst = [0, 0, 0, 0]
    src = [100, -200, 300, -400]
    mix_into(dst, src, MAX_VOLUME, 0)
    assert dst == src


def test_mix_into_accumulates():
    dst = [5, 5]
    mix_into(dst, [10, 20], MAX_VOLUME, 0)
    mix_into(dst, [10, 20], MAX_VOLUME, 0)
    assert dst == [25, 45]


def test_mix_into_zero_volume_is_noop():
    dst = [1, 2, 3]
    mix_into(dst, [1000, 1000, 1000], 0, 0)
    assert dst == [1, 2, 3]


def test_mix_into_volume_is_capped():
    capped = [0, 0]
    full = [0, 0]
    mix_into(capped, [777, -777], 250, 0)
    mix_into(full, [777, -777], MAX_VOLUME, 0)
    assert capped == full


def test_mix_into_truncates_toward_zero():
    dst = [0, 0]
    mix_into(dst, [-3, 3], 50, 0)
    assert dst == [-1, 1]


def test_mix_into_full_pan_silences_one_side():
    right = [0, 0]
    mix_into(right, [1000, 1000], MAX_VOLUME, 100)
    assert right == [0, 1000]

    left = [0, 0]
    mix_into(left, [1000, 1000], MAX_VOLUME, -100)
    assert left == [1000, 0]


def test_mix_into_rejects_oversized_source():
    with pytest.raises(ValueError):
        mix_into([0], [1, 2], MAX_VOLUME, 0)


def test_set_sample_rejects_bad_id():
    mixer = Mixer()
    with pytest.raises(ValueError):
        mixer.set_sample(0x100, "Jump.wav", [1])
    with pytest.raises(ValueError):
        mixer.play_sfx(-1, False)


def test_release_sample_clears_slot():
    mixer = Mixer()
    mixer.set_sample(3, "Ring.wav", [1, 2, 3])
    assert mixer.samples[3].loaded
    mixer.release_sample(3)
    assert mixer.samples[3].loaded is False
    assert mixer.samples[3].name == ""
    assert mixer.samples[3].samples == []


def test_play_sfx_round_robin_and_wrap():
    mixer = Mixer()
    for sfx in range(5):
        mixer.set_sample(sfx, f"s{sfx}.wav", [1, 1])
    used = [mixer.play_sfx(sfx, False) for sfx in range(CHANNEL_COUNT)]
    assert used == list(range(CHANNEL_COUNT))
    assert mixer.next_channel_pos == 0
    assert mixer.play_sfx(4, False) == 0
    assert mixer.channels[0].sfx_id == 4


def test_play_sfx_reuses_channel_of_same_effect():
    mixer = Mixer()
    mixer.set_sample(7, "Spin.wav", [1, 2])
    first = mixer.play_sfx(7, False)
    second = mixer.play_sfx(7, True)
    assert first == second
    assert [c.sfx_id for c in mixer.channels].count(7) == 1
    assert mixer.channels[first].loop is True


def test_mix_sfx_one_shot_then_frees_channel():
    mixer = Mixer()
    mixer.set_sample(1, "Beep.wav", [10, 20, 30])
    channel_id = mixer.play_sfx(1, False)
    buffer = [0] * 6
    mixer.mix_sfx(buffer, 6, MAX_VOLUME)
    assert buffer == [10, 20, 30, 0, 0, 0]
    assert mixer.channels[channel_id] == Channel()


def test_mix_sfx_loops_across_calls():
    mixer = Mixer()
    mixer.set_sample(2, "Loop.wav", [1, 2])
    channel_id = mixer.play_sfx(2, True)
    buffer = [0] * 5
    mixer.mix_sfx(buffer, 5, MAX_VOLUME)
    assert buffer == [1, 2, 1, 2, 1]
    assert mixer.channels[channel_id].active
    following = [0, 0]
    mixer.mix_sfx(following, 2, MAX_VOLUME)
    assert following == [2, 1]


def test_mix_sfx_zero_volume_still_advances():
    mixer = Mixer()
    mixer.set_sample(0, "Tick.wav", [5, 6, 7, 8])
    channel_id = mixer.play_sfx(0, False)
    buffer = [0, 0]
    mixer.mix_sfx(buffer, 2, 0)
    assert buffer == [0, 0]
    assert mixer.channels[channel_id].remaining == 2


def test_mix_sfx_rejects_count_larger_than_buffer():
    mixer = Mixer()
    with pytest.raises(ValueError):
        mixer.mix_sfx([0, 0], 3, MAX_VOLUME)


def test_stop_sfx_and_stop_all():
    mixer = Mixer()
    mixer.set_sample(1, "a.wav", [1])
    mixer.set_sample(2, "b.wav", [1])
    a = mixer.play_sfx(1, True)
    b = mixer.play_sfx(2, True)
    mixer.stop_sfx(1)
    assert mixer.channels[a] == Channel()
    assert mixer.channels[b].sfx_id == 2
    mixer.stop_all_sfx()
    assert all(not c.active for c in mixer.channels)
    buffer = [0, 0]
    mixer.mix_sfx(buffer, 2, MAX_VOLUME)
    assert buffer == [0, 0]


def test_set_sfx_attributes_keeps_loop_with_minus_one():
    mixer = Mixer()
    mixer.set_sample(4, "Hum.wav", [1, 1])
    channel_id = mixer.play_sfx(4, True)
    assert mixer.set_sfx_attributes(4, -1, -50) == channel_id
    assert mixer.channels[channel_id].loop is True
    assert mixer.channels[channel_id].pan == -50


def test_set_sfx_attributes_returns_none_when_busy():
    mixer = Mixer()
    for sfx in range(CHANNEL_COUNT + 1):
        mixer.set_sample(sfx, f"s{sfx}.wav", [1])
    for sfx in range(CHANNEL_COUNT):
        mixer.play_sfx(sfx, True)
    assert mixer.set_sfx_attributes(CHANNEL_COUNT, 1, 0) is None
    assert [c.sfx_id for c in mixer.channels] == list(range(CHANNEL_COUNT))