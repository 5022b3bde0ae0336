# rsdkaudio

rsdkaudio is the data-handling core of a small retro 2D game engine. It covers three areas:

- sprite animation files
- graphics surface bookkeeping
- sound-effect and music mixing

You provide the file access and the music decoding. The package handles the parsing, the bookkeeping and the sample arithmetic. Its results are plain Python data: lists of ints and dataclasses.

## Install

```
pip install .
pip install ".[test]"   # adds pytest for running the tests
```

## Modules

### `rsdkaudio.animation`

This module parses the engine's binary animation files and steps entity animations.

`AnimationStore(load_file, add_graphics_file)` takes two callables:

- `load_file(path)` returns the bytes of a data file, or `None` when the file is missing.
- `add_graphics_file(name)` returns a sheet ID for a sprite-sheet name.

The store's public lists are `files`, `animations`, `frames`, `script_frames` and `hitboxes`. Its methods are:

- `load_animation_data(data)` parses animation bytes and appends the records to the store. It returns an `AnimationFile`.
- `load_animation_file(path)` loads the file at `path` and parses it. It returns `None` when the file cannot be read.
- `add_animation_file(name)` returns the entry already loaded under `name`. Otherwise it loads `Data/Animations/<name>` and registers it. It returns `None` once 256 files are registered.
- `default_animation_file()` returns the first registered file. When nothing is registered it returns an empty `AnimationFile`.
- `clear()` empties every list.
- `process_object_animation(object_script, entity)` advances an `Entity` by one tick. It does the following:
  - It adds the animation speed to the entity's timer. The entity's own speed is used when it is positive, capped at 0xF0.
  - It resets the frame, timer and speed when the entity's animation has changed.
  - It moves on one frame each time the timer reaches 0xF0.
  - It wraps to the loop point after the last frame.

The animation limits are 1024 animations, 4096 frames and 32 hitboxes. Truncated data or a limit being exceeded raises `AnimationError`. Animations using `RotationStyle.STATIC_FRAMES` keep only half of their frames as animation frames.

The module also defines `RotationStyle`, `AnimationFile`, `SpriteAnimation`, `SpriteFrame`, `Hitbox` (eight directions per box) and `ObjectScript`.

### `rsdkaudio.drawing`

- `FlipFlags`, `InkFlags` and `DrawFXFlags` are the drawing flag enums.
- `GFXSurface` is the record for one sprite sheet.
- `GraphicsStore` holds 32 surfaces and a shared 0x800 × 0x800 byte buffer. `clear()` blanks the surface names and resets the data position.
- `check_surface_size(size)` is true when `size` is a power of two from 2 to 1024.

### `rsdkaudio.mixer`

- `clamp_sample(value)` clips a value to the signed 16-bit range.
- `mix_into(dst, src, volume, pan)` adds `src` into `dst` in place. Samples are interleaved stereo. The volume is capped at 100. A negative pan lowers the right side and a positive pan lowers the left. A `src` longer than `dst` raises `ValueError`.
- `Mixer` holds 256 sample slots (`SfxSample`) and 4 playback channels (`Channel`). Its methods are:
  - `set_sample(sfx_id, name, samples)` and `release_sample(sfx_id)` fill and free a slot.
  - `play_sfx(sfx, loop)` starts an effect and returns the channel index. It reuses the effect's own channel if it is already playing, and otherwise takes the next channel in rotation.
  - `stop_sfx(sfx)` and `stop_all_sfx()` stop playback.
  - `set_sfx_attributes(sfx, loop_count, pan)` restarts an effect with a pan, on its own channel or the first free one. A `loop_count` of -1 keeps the loop flag. It returns `None` when every channel is busy.
  - `mix_sfx(mix_buffer, sample_count, volume)` mixes every active channel into the buffer. Looping channels wrap to the start, and other channels stop when they finish.

An out-of-range effect ID raises `ValueError`.

### `rsdkaudio.audio`

`AudioEngine(load_file, decoder_factory)` takes two callables:

- `load_file` has the same form as for `AnimationStore`.
- `decoder_factory(data)` returns a `MusicDecoder`. That is any object with `read(max_samples)`, which returns interleaved 16-bit samples and an empty result at the end, and `seek(pcm_position)`.

Its methods are:

- `init_playback()` enables audio and loads the global effects.
- `load_global_sfx()` reads the effect list from `Data/Game/GameConfig.bin` and loads each effect into the first slots.
- `load_sfx(file_path, sfx_id)` loads `Data/SoundFX/<file_path>`. The file must be PCM WAV, 8- or 16-bit, mono or stereo. It is converted to interleaved stereo at 44100 Hz.
- `set_music_track(file_path, track_id, loop, loop_point)` sets up one of 16 tracks under `Data/Music/`.
- `play_music(track)` opens the track through the decoder factory.
- `stop_music()` stops the music.
- `set_music_volume(volume)` sets the music volume, clamped to 0–100.
- `pause_sound()` and `resume_sound()` pause and resume the music.
- `release_global_sfx()`, `release_stage_sfx()` and `release()` free loaded effects.
- `render(sample_count)` returns mixed and clamped 16-bit samples. Music plays at `bgm_volume × master_volume / 100` and effects at `sfx_volume`. A looping track seeks back to its loop point when it runs out. While audio is not enabled, `render` returns silence.

There are two helpers:

- `sfx_display_name(name)` gives an effect's short name: the text after the first slash, up to the dot, with spaces removed.
- `read_game_config_sfx_names(data)` returns the global effect paths from game config bytes.

Malformed config or wave data and invalid track numbers raise `AudioError`. `MusicStatus`, `TrackInfo` and `MusicStream` describe the music state.

## Example

```python
from rsdkaudio.mixer import Mixer

mixer = Mixer()
mixer.set_sample(0, "Jump.wav", [1000, -1000, 2000, -2000])
mixer.play_sfx(0, False)

buffer = [0] * 4
mixer.mix_sfx(buffer, 4, 100)
print(buffer)  # [1000, -1000, 2000, -2000]
```

## What it does not do

- It opens no audio device and no window. `render` returns samples, and sending them to a sound card is up to the caller.
- It does not decode compressed music. Music decoding comes from the `decoder_factory` you pass in.
- It does no sprite drawing. `rsdkaudio.drawing` holds only the flags and the surface table.
- It has no command-line program and does not run a game.