#!/usr/bin/env python3
"""
Beat Particle Visualiser CLI Tool
=================================

Renders an audio-reactive particle animation from an audio file. Beats are
detected from bass energy with an adaptive threshold; each beat spawns a burst
of particles from the center or along the waveform.

Usage:
    python -m beatvis input.wav --output result.mp4
    python -m beatvis input.wav --mode wave --config http://localhost:5000/api/config
    python -m beatvis input.wav --preview
    python -m beatvis -h (for help)
"""

import argparse
import logging
import os
import sys

from moviepy import AudioFileClip, VideoClip

from beatvis.audio_source import LibrosaFrameSource
from beatvis.config import load_config
from beatvis.constants import DEFAULT_FPS, DEFAULT_RESOLUTION
from beatvis.frame_scheduler import VisualMode
from beatvis.renderer import VisualiserRenderer

logger = logging.getLogger("beatvis")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="beatvis",
        description="Render a beat-reactive particle animation from an audio file.",
    )
    parser.add_argument("input", help="Path to input audio file (WAV/MP3)")
    parser.add_argument("--output", "-o", default="output.mp4", help="Path to output video file")
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Canvas width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Canvas height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, help="Limit duration in seconds (optional)")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in VisualMode],
        default=VisualMode.CENTER.value,
        help="Visual mode: center burst or wave flow",
    )
    parser.add_argument("--config", help="Config URL or JSON file (defaults are used if unavailable)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible particles")
    parser.add_argument("--preview", action="store_true", help="Show a live window instead of writing a video")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every detected beat")
    return parser.parse_args(argv)


def render_video(renderer, input_path, output_path, duration, fps):
    # VideoClip calls make_frame(0) once up front to learn the frame size
    video_clip = VideoClip(renderer.make_frame, duration=duration)

    # Attach original audio
    audio_clip = AudioFileClip(input_path)
    # Ensure audio is cut if we truncated duration
    audio_clip = audio_clip.subclipped(0, duration)
    video_clip = video_clip.with_audio(audio_clip)

    logger.info("[+] Rendering video... (This may take a while)")
    video_clip.write_videofile(
        output_path,
        fps=fps,
        codec="libx264",
        audio_codec="aac",
        threads=4,
        preset="medium",  # Balance between speed and compression
        logger="bar",
    )
    logger.info(f"[+] Done! Saved to {output_path}")


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")

    # 2. Configuration (never fatal)
    config = load_config(args.config)

    # 3. Analyze Audio
    try:
        source = LibrosaFrameSource.load(args.input)
    except Exception as e:
        sys.exit(f"[!] Error loading audio file: {e}")

    duration = source.duration
    if args.duration and args.duration < duration:
        duration = args.duration
        logger.info(f"[i] Truncating duration to {duration} seconds.")

    logger.info(f"[+] Preparing render: {args.width}x{args.height} @ {args.fps}fps, mode={args.mode}")
    logger.info(f"[+] Duration: {duration:.2f} seconds")

    renderer = VisualiserRenderer(
        source,
        args.width,
        args.height,
        args.fps,
        config=config,
        mode=args.mode,
        seed=args.seed,
    )

    # 4. Render
    try:
        if args.preview:
            renderer.run_preview(duration)
        else:
            render_video(renderer, args.input, args.output, duration, args.fps)
    finally:
        renderer.close()


if __name__ == "__main__":
    main()
