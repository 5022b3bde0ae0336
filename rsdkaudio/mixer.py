"""Sound-effect channels and 16-bit sample mixing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, MutableSequence, Sequence

MAX_VOLUME = 100
SFX_COUNT = 0x100
CHANNEL_COUNT = 4
MIX_BUFFER_SAMPLES = 256

SAMPLE_MAX = (1 << 15) - 1
SAMPLE_MIN = -(1 << 15)


def clamp_sample(value: int) -> int:
    """Clamp a mixed sample back into the signed 16-bit range."""
    if value > SAMPLE_MAX:
        return SAMPLE_MAX
    if value < SAMPLE_MIN:
        return SAMPLE_MIN
    return value


def _scale_volume(sample: int, volume: int) -> int:
    # Integer division that truncates toward zero, as fixed-width arithmetic does.
    product = sample * volume
    quotient = abs(product) // MAX_VOLUME
    return quotient if product >= 0 else -quotient


def mix_into(dst: MutableSequence[int], src: Sequence[int], volume: int, pan: int) -> None:
    """Add ``src`` into ``dst`` in place, scaled by volume and panned.

    Samples are interleaved stereo: even indices are left, odd are right.
    A negative pan attenuates the right side, a positive pan the left.
    """
    if volume == 0:
        return
    if len(src) > len(dst):
        raise ValueError("source is longer than the destination buffer")
    volume = min(volume, MAX_VOLUME)

    pan_left = pan_right = 0.0
    if pan < 0:
        pan_right = 1.0 - abs(pan / 100.0)
        pan_left = 1.0
    elif pan > 0:
        pan_left = 1.0 - abs(pan / 100.0)
        pan_right = 1.0

    for index, raw in enumerate(src):
        sample = _scale_volume(raw, volume)
        if pan != 0:
            sample = int(sample * (pan_right if index % 2 else pan_left))
        dst[index] += sample


@dataclass
class SfxSample:
    """A loaded sound effect, already converted to the output format."""

    name: str = ""
    samples: list[int] = field(default_factory=list)
    loaded: bool = False


@dataclass
class Channel:
    """One playback voice: which effect it plays and how far it has got."""

    sfx_id: int = -1
    position: int = 0
    remaining: int = 0
    loop: bool = False
    pan: int = 0

    @property
    def active(self) -> bool:
        return self.sfx_id >= 0

    def reset(self) -> None:
        self.sfx_id = -1
        self.position = 0
        self.remaining = 0
        self.loop = False
        self.pan = 0


class Mixer:
    """Sound-effect table and the fixed set of channels that play from it."""

    def __init__(self) -> None:
        self.samples = [SfxSample() for _ in range(SFX_COUNT)]
        self.channels = [Channel() for _ in range(CHANNEL_COUNT)]
        self.next_channel_pos = 0

    @staticmethod
    def _check_id(sfx_id: int) -> None:
        if not 0 <= sfx_id < SFX_COUNT:
            raise ValueError(f"sound effect id {sfx_id} is out of range")

    def set_sample(self, sfx_id: int, name: str, samples: Iterable[int]) -> None:
        """Store converted sample data in slot ``sfx_id``."""
        self._check_id(sfx_id)
        self.samples[sfx_id] = SfxSample(name=name, samples=list(samples), loaded=True)

    def release_sample(self, sfx_id: int) -> None:
        """Free slot ``sfx_id`` if it holds a loaded effect."""
        self._check_id(sfx_id)
        entry = self.samples[sfx_id]
        if entry.loaded:
            entry.name = ""
            entry.samples = []
            entry.loaded = False

    def _start(self, channel: Channel, sfx: int) -> None:
        channel.position = 0
        channel.remaining = len(self.samples[sfx].samples)

    def play_sfx(self, sfx: int, loop: bool) -> int:
        """Start ``sfx``, reusing its channel if already playing; return the channel index."""
        self._check_id(sfx)
        channel_id = self.next_channel_pos
        self.next_channel_pos += 1
        for index, channel in enumerate(self.channels):
            if channel.sfx_id == sfx:
                channel_id = index
                break

        channel = self.channels[channel_id]
        channel.sfx_id = sfx
        self._start(channel, sfx)
        channel.loop = bool(loop)
        channel.pan = 0
        if self.next_channel_pos == CHANNEL_COUNT:
            self.next_channel_pos = 0
        return channel_id

    def stop_sfx(self, sfx: int) -> None:
        for channel in self.channels:
            if channel.sfx_id == sfx:
                channel.reset()

    def stop_all_sfx(self) -> None:
        for channel in self.channels:
            channel.sfx_id = -1

    def set_sfx_attributes(self, sfx: int, loop_count: int, pan: int) -> int | None:
        """(Re)start ``sfx`` with a pan, on its own channel or the first free one.

        A ``loop_count`` of -1 keeps the channel's loop flag. Returns the
        channel index used, or None when every channel is busy with other effects.
        """
        self._check_id(sfx)
        for index, channel in enumerate(self.channels):
            if channel.sfx_id in (sfx, -1):
                break
        else:
            return None

        self._start(channel, sfx)
        if loop_count != -1:
            channel.loop = bool(loop_count & 0xFF)
        channel.pan = pan
        channel.sfx_id = sfx
        return index

    def mix_sfx(self, mix_buffer: MutableSequence[int], sample_count: int, volume: int) -> None:
        """Mix ``sample_count`` samples of every active channel into ``mix_buffer``."""
        if sample_count > len(mix_buffer):
            raise ValueError("sample count exceeds the mix buffer")

        for channel in self.channels:
            if not channel.active:
                continue
            source = self.samples[channel.sfx_id]
            if not source.loaded:
                continue
            if not source.samples:
                if not channel.loop:
                    channel.reset()
                continue

            chunk: list[int] = []
            while len(chunk) != sample_count:
                take = min(channel.remaining, sample_count - len(chunk))
                chunk.extend(source.samples[channel.position:channel.position + take])
                channel.position += take
                channel.remaining -= take

                if channel.remaining == 0:
                    if channel.loop:
                        channel.position = 0
                        channel.remaining = len(source.samples)
                    else:
                        channel.reset()
                        break

            mix_into(mix_buffer, chunk, volume, channel.pan)