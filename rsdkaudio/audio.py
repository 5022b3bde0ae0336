"""Music streaming, sound-effect loading and the final output mix."""

from __future__ import annotations

import io
import logging
import struct
import sys
import wave
from array import array
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional, Protocol, Sequence

from .mixer import (
    CHANNEL_COUNT,
    MAX_VOLUME,
    MIX_BUFFER_SAMPLES,
    SFX_COUNT,
    Mixer,
    clamp_sample,
    mix_into,
)

log = logging.getLogger(__name__)

TRACK_COUNT = 0x10
AUDIO_FREQUENCY = 44100
AUDIO_CHANNELS = 2

GAME_CONFIG_PATH = "Data/Game/GameConfig.bin"
MUSIC_PATH_PREFIX = "Data/Music/"
SFX_PATH_PREFIX = "Data/SoundFX/"


class AudioError(Exception):
    """Raised for malformed audio data or invalid audio requests."""


class MusicStatus(IntEnum):
    STOPPED = 0
    PLAYING = 1
    PAUSED = 2
    LOADING = 3
    READY = 4


class MusicDecoder(Protocol):
    """Decodes a music file into interleaved signed 16-bit output samples."""

    def read(self, max_samples: int) -> Sequence[int]:
        """Return up to ``max_samples`` samples; an empty result marks the end."""

    def seek(self, pcm_position: int) -> None:
        """Move to the given PCM frame."""


@dataclass
class TrackInfo:
    file_name: str = ""
    track_loop: bool = False
    loop_point: int = 0


@dataclass
class MusicStream:
    """A playing music track: its decoder and the decoded samples not yet mixed."""

    decoder: MusicDecoder
    track_loop: bool = False
    loop_point: int = 0
    pending: list[int] = field(default_factory=list)
    loaded: bool = True


def sfx_display_name(sfx_name: str) -> str:
    """Short name of an effect: the part after the first slash, up to a dot, spaces removed."""
    mode = 0
    out: list[str] = []
    for char in sfx_name:
        if char == "." and mode == 1:
            mode = 2
        elif char in "/\\" and mode == 0:
            mode = 1
        elif char != " " and mode == 1:
            out.append(char)
    return "".join(out)


class _ConfigReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise AudioError("game config ends unexpectedly")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_string(self) -> str:
        return self.read(self.read_u8()).split(b"\0", 1)[0].decode("latin-1")


def read_game_config_sfx_names(data: bytes) -> list[str]:
    """Return the global sound-effect paths listed in a game config file."""
    reader = _ConfigReader(data)
    for _ in range(3):  # title, data folder, description
        reader.read_string()

    object_count = reader.read_u8()
    for _ in range(object_count * 2):  # object names, then script paths
        reader.read_string()

    for _ in range(reader.read_u8()):
        reader.read_string()
        reader.read(4)  # variable value

    return [reader.read_string() for _ in range(reader.read_u8())]


def _decode_wav(data: bytes) -> list[int]:
    """Decode PCM WAV bytes into interleaved stereo 16-bit samples at the output rate."""
    try:
        with wave.open(io.BytesIO(data), "rb") as wav:
            channels = wav.getnchannels()
            width = wav.getsampwidth()
            rate = wav.getframerate()
            raw = wav.readframes(wav.getnframes())
    except (wave.Error, EOFError, struct.error) as exc:
        raise AudioError(f"unreadable wave data: {exc}") from exc

    if width == 1:
        samples = [(byte - 0x80) << 8 for byte in raw]
    elif width == 2:
        pcm = array("h")
        pcm.frombytes(raw[: len(raw) - len(raw) % 2])
        if sys.byteorder == "big":
            pcm.byteswap()
        samples = pcm.tolist()
    else:
        raise AudioError(f"unsupported sample width: {width} bytes")

    if channels == 1:
        frames = [(s, s) for s in samples]
    elif channels == 2:
        frames = list(zip(samples[0::2], samples[1::2]))
    else:
        raise AudioError(f"unsupported channel count: {channels}")

    if rate <= 0:
        raise AudioError("invalid sample rate")
    if rate != AUDIO_FREQUENCY and frames:
        out_count = len(frames) * AUDIO_FREQUENCY // rate
        frames = [frames[index * rate // AUDIO_FREQUENCY] for index in range(out_count)]

    return [sample for frame in frames for sample in frame]


class AudioEngine:
    """Music tracks, sound effects and the output mix they are rendered into."""

    def __init__(
        self,
        load_file: Callable[[str], Optional[bytes]],
        decoder_factory: Callable[[bytes], MusicDecoder],
    ) -> None:
        self._load_file = load_file
        self._decoder_factory = decoder_factory
        self.mixer = Mixer()
        self.tracks = [TrackInfo() for _ in range(TRACK_COUNT)]
        self.stream: Optional[MusicStream] = None
        self.music_status = MusicStatus.STOPPED
        self.current_music_track = -1
        self.track_id = -1
        self.master_volume = MAX_VOLUME
        self.sfx_volume = MAX_VOLUME
        self.bgm_volume = MAX_VOLUME
        self.audio_enabled = False
        self.global_sfx_count = 0
        self.stage_sfx_count = 0
        self.global_sfx_names = [""] * SFX_COUNT
        self.stage_sfx_names = [""] * SFX_COUNT

    def init_playback(self) -> bool:
        self.mixer.stop_all_sfx()
        self.audio_enabled = True
        self.load_global_sfx()
        return True

    def load_global_sfx(self) -> None:
        """Load every effect named in the game config into the first slots."""
        self.global_sfx_count = 0
        data = self._load_file(GAME_CONFIG_PATH)
        if data is not None:
            names = read_game_config_sfx_names(data)
            self.global_sfx_count = len(names)
            for sfx_id, name in enumerate(names):
                self.load_sfx(name, sfx_id)
                self.global_sfx_names[sfx_id] = sfx_display_name(name)
                log.debug("Set Global SFX (%d) name to: %s", sfx_id, self.global_sfx_names[sfx_id])

        self.mixer.next_channel_pos = 0
        for _ in range(CHANNEL_COUNT):
            self.mixer.stop_all_sfx()

    def load_sfx(self, file_path: str, sfx_id: int) -> bool:
        """Load a wave file into slot ``sfx_id``; False if it could not be loaded."""
        if not self.audio_enabled:
            return False
        full_path = SFX_PATH_PREFIX + file_path
        data = self._load_file(full_path)
        if data is None:
            return False
        try:
            samples = _decode_wav(data)
        except AudioError as exc:
            log.warning("Unable to read sfx: %s (%s)", full_path, exc)
            return False
        self.mixer.set_sample(sfx_id, file_path, samples)
        return True

    def set_music_track(self, file_path: str, track_id: int, loop: bool, loop_point: int) -> None:
        if not 0 <= track_id < TRACK_COUNT:
            raise AudioError(f"music track {track_id} is out of range")
        self.tracks[track_id] = TrackInfo(MUSIC_PATH_PREFIX + file_path, bool(loop), loop_point)

    def play_music(self, track: int) -> bool:
        """Start a track set up earlier; False when nothing was started."""
        if not self.audio_enabled:
            return False
        if not 0 <= track < TRACK_COUNT:
            raise AudioError(f"music track {track} is out of range")

        if self.tracks[track].file_name:
            if self.music_status != MusicStatus.LOADING:
                self.current_music_track = track
                self.music_status = MusicStatus.LOADING
                self._load_music()
                return True
            log.warning("music tried to play while music was loading")
        else:
            self.stop_music()
        return False

    def _load_music(self) -> None:
        self.stream = None
        info = self.tracks[self.current_music_track]
        data = self._load_file(info.file_name)
        if data is None:
            self.music_status = MusicStatus.STOPPED
            return
        try:
            decoder = self._decoder_factory(data)
        except Exception as exc:  # the decoder may fail in any way on bad data
            self.music_status = MusicStatus.STOPPED
            log.warning("Failed to open music %s: %s", info.file_name, exc)
            return

        self.stream = MusicStream(decoder, info.track_loop, info.loop_point)
        self.music_status = MusicStatus.PLAYING
        self.master_volume = MAX_VOLUME
        self.track_id = self.current_music_track
        self.current_music_track = -1

    def stop_music(self) -> None:
        self.music_status = MusicStatus.STOPPED
        self.stream = None

    def set_music_volume(self, volume: int) -> None:
        self.master_volume = max(0, min(volume, MAX_VOLUME))

    def pause_sound(self) -> bool:
        if self.music_status == MusicStatus.PLAYING:
            self.music_status = MusicStatus.PAUSED
            return True
        return False

    def resume_sound(self) -> None:
        if self.music_status == MusicStatus.PAUSED:
            self.music_status = MusicStatus.PLAYING

    def release_global_sfx(self) -> None:
        self.mixer.stop_all_sfx()
        for sfx_id in range(min(self.global_sfx_count, SFX_COUNT) - 1, -1, -1):
            self.mixer.release_sample(sfx_id)
        self.global_sfx_count = 0

    def release_stage_sfx(self) -> None:
        top = min(self.stage_sfx_count + self.global_sfx_count, SFX_COUNT - 1)
        for sfx_id in range(top, self.global_sfx_count - 1, -1):
            self.mixer.release_sample(sfx_id)
        self.stage_sfx_count = 0

    def release(self) -> None:
        self.stop_music()
        self.mixer.stop_all_sfx()
        self.release_stage_sfx()
        self.release_global_sfx()

    def _mix_music(self, mix_buffer: list[int], wanted: int) -> None:
        stream = self.stream
        if stream is None or self.music_status not in (MusicStatus.READY, MusicStatus.PLAYING):
            return

        rewound = False
        while self.music_status == MusicStatus.PLAYING and len(stream.pending) < wanted:
            chunk = stream.decoder.read(MIX_BUFFER_SAMPLES)
            if not chunk:
                # A track that yields nothing even after rewinding would loop forever.
                if stream.track_loop and not rewound:
                    stream.decoder.seek(stream.loop_point)
                    rewound = True
                    continue
                self.music_status = MusicStatus.STOPPED
                break
            rewound = False
            stream.pending.extend(chunk)

        take = stream.pending[:wanted]
        del stream.pending[:wanted]
        if take:
            mix_into(mix_buffer, take, self.bgm_volume * self.master_volume // MAX_VOLUME, 0)

    def render(self, sample_count: int) -> list[int]:
        """Produce ``sample_count`` interleaved stereo output samples."""
        if sample_count < 0:
            raise ValueError("sample count must not be negative")
        if not self.audio_enabled:
            return [0] * sample_count

        output: list[int] = []
        remaining = sample_count
        while remaining:
            todo = min(remaining, MIX_BUFFER_SAMPLES)
            mix_buffer = [0] * todo
            self._mix_music(mix_buffer, todo)
            self.mixer.mix_sfx(mix_buffer, todo, self.sfx_volume)
            output.extend(clamp_sample(sample) for sample in mix_buffer)
            remaining -= todo
        return output