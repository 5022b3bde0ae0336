"""Sprite animation files: parsing, storage and per-entity frame stepping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional

ANIFILE_COUNT = 0x100
ANIMATION_COUNT = 0x400
SPRITEFRAME_COUNT = 0x1000
HITBOX_COUNT = 0x20
HITBOX_DIR_COUNT = 0x8

ANIMATION_PATH_PREFIX = "Data/Animations/"
ANIMATION_TIMER_LIMIT = 0xF0
_SHEET_SLOTS = 0x18


class AnimationError(Exception):
    """Raised for malformed animation data or exhausted storage."""


class RotationStyle(IntEnum):
    NONE = 0
    FULL = 1
    DEG45 = 2
    STATIC_FRAMES = 3


@dataclass
class AnimationFile:
    file_name: str = ""
    anim_count: int = 0
    ani_list_offset: int = 0
    hitbox_list_offset: int = 0


@dataclass
class SpriteAnimation:
    name: str = ""
    frame_count: int = 0
    speed: int = 0
    loop_point: int = 0
    rotation_style: int = RotationStyle.NONE
    frame_list_offset: int = 0


@dataclass
class SpriteFrame:
    spr_x: int = 0
    spr_y: int = 0
    width: int = 0
    height: int = 0
    pivot_x: int = 0
    pivot_y: int = 0
    sheet_id: int = 0
    hitbox_id: int = 0


def _direction_list() -> list[int]:
    return [0] * HITBOX_DIR_COUNT


@dataclass
class Hitbox:
    left: list[int] = field(default_factory=_direction_list)
    top: list[int] = field(default_factory=_direction_list)
    right: list[int] = field(default_factory=_direction_list)
    bottom: list[int] = field(default_factory=_direction_list)


@dataclass
class ObjectScript:
    """Per-object script record; only the animation-related parts are used here."""

    frame_count: int = 0
    sprite_sheet_id: int = 0
    sub_main: tuple[int, int] = (0, 0)
    sub_player_interaction: tuple[int, int] = (0, 0)
    sub_draw: tuple[int, int] = (0, 0)
    sub_startup: tuple[int, int] = (0, 0)
    frame_list_offset: int = 0
    anim_file: Optional[AnimationFile] = None
    mobile: bool = False


@dataclass
class Entity:
    animation: int = 0
    prev_animation: int = 0
    frame: int = 0
    animation_timer: int = 0
    animation_speed: int = 0


class _ByteReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read_bytes(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise AnimationError("animation data ends unexpectedly")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def read_s8(self) -> int:
        value = self.read_u8()
        return value - 0x100 if value >= 0x80 else value

    def read_string(self) -> str:
        raw = self.read_bytes(self.read_u8())
        return raw.split(b"\0", 1)[0].decode("latin-1")


class AnimationStore:
    """Holds every loaded animation file, animation, frame and hitbox."""

    def __init__(
        self,
        load_file: Callable[[str], Optional[bytes]],
        add_graphics_file: Callable[[str], int],
    ) -> None:
        self._load_file = load_file
        self._add_graphics_file = add_graphics_file
        self.files: list[AnimationFile] = []
        self.animations: list[SpriteAnimation] = []
        self.frames: list[SpriteFrame] = []
        self.script_frames: list[SpriteFrame] = []
        self.hitboxes: list[Hitbox] = []

    def load_animation_data(self, data: bytes) -> AnimationFile:
        """Parse an animation file's bytes, appending its records to the store."""
        reader = _ByteReader(data)

        sheet_count = reader.read_u8()
        sheet_ids = [0] * max(_SHEET_SLOTS, sheet_count)
        for index in range(sheet_count):
            name = reader.read_string()
            if name:
                sheet_ids[index] = self._add_graphics_file(name)

        anim_count = reader.read_u8()
        anim_file = AnimationFile(anim_count=anim_count, ani_list_offset=len(self.animations))

        for _ in range(anim_count):
            if len(self.animations) >= ANIMATION_COUNT:
                raise AnimationError("too many animations loaded")
            anim = SpriteAnimation(frame_list_offset=len(self.frames))
            anim.name = reader.read_string()
            anim.frame_count = reader.read_u8()
            anim.speed = reader.read_u8()
            anim.loop_point = reader.read_u8()
            anim.rotation_style = reader.read_u8()
            self.animations.append(anim)

            for _ in range(anim.frame_count):
                if len(self.frames) >= SPRITEFRAME_COUNT:
                    raise AnimationError("too many sprite frames loaded")
                sheet_index = reader.read_u8()
                frame = SpriteFrame(
                    sheet_id=sheet_ids[sheet_index] if sheet_index < len(sheet_ids) else 0,
                    hitbox_id=reader.read_u8(),
                    spr_x=reader.read_u8(),
                    spr_y=reader.read_u8(),
                    width=reader.read_u8(),
                    height=reader.read_u8(),
                    pivot_x=reader.read_s8(),
                    pivot_y=reader.read_s8(),
                )
                self.frames.append(frame)

            # Extra frames hold pre-rotated copies; only half are animation frames.
            if anim.rotation_style == RotationStyle.STATIC_FRAMES:
                anim.frame_count >>= 1

        anim_file.hitbox_list_offset = len(self.hitboxes)
        for _ in range(reader.read_u8()):
            if len(self.hitboxes) >= HITBOX_COUNT:
                raise AnimationError("too many hitboxes loaded")
            hitbox = Hitbox()
            for direction in range(HITBOX_DIR_COUNT):
                hitbox.left[direction] = reader.read_s8()
                hitbox.top[direction] = reader.read_s8()
                hitbox.right[direction] = reader.read_s8()
                hitbox.bottom[direction] = reader.read_s8()
            self.hitboxes.append(hitbox)

        return anim_file

    def load_animation_file(self, file_path: str) -> Optional[AnimationFile]:
        """Load and parse the file at ``file_path``; None if it cannot be read."""
        data = self._load_file(file_path)
        if data is None:
            return None
        return self.load_animation_data(data)

    def clear(self) -> None:
        self.files.clear()
        self.animations.clear()
        self.frames.clear()
        self.script_frames.clear()
        self.hitboxes.clear()

    def add_animation_file(self, file_path: str) -> Optional[AnimationFile]:
        """Return the already loaded file of this name, or load and register it."""
        for anim_file in self.files:
            if anim_file.file_name == file_path:
                return anim_file
        if len(self.files) >= ANIFILE_COUNT:
            return None
        entry = self.load_animation_file(ANIMATION_PATH_PREFIX + file_path) or AnimationFile()
        entry.file_name = file_path
        self.files.append(entry)
        return entry

    def default_animation_file(self) -> AnimationFile:
        return self.files[0] if self.files else AnimationFile()

    def process_object_animation(self, object_script: ObjectScript, entity: Entity) -> None:
        """Advance ``entity``'s animation timer and frame by one tick."""
        if object_script.anim_file is None:
            raise AnimationError("object script has no animation file")
        anim = self.animations[object_script.anim_file.ani_list_offset + entity.animation]

        if entity.animation_speed <= 0:
            entity.animation_timer += anim.speed
        else:
            if entity.animation_speed > ANIMATION_TIMER_LIMIT:
                entity.animation_speed = ANIMATION_TIMER_LIMIT
            entity.animation_timer += entity.animation_speed

        if entity.animation != entity.prev_animation:
            entity.prev_animation = entity.animation
            entity.frame = 0
            entity.animation_timer = 0
            entity.animation_speed = 0

        if entity.animation_timer >= ANIMATION_TIMER_LIMIT:
            entity.animation_timer -= ANIMATION_TIMER_LIMIT
            entity.frame += 1

        if entity.frame >= anim.frame_count:
            entity.frame = anim.loop_point