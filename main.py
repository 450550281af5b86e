#!/usr/bin/env python3
"""
Main entry point for the doomscroll detection system.
Provides command-line interface for real-time monitoring.
"""

import os
import warnings
import logging

# Suppress warnings unless verbose mode
os.environ['TF_CPP_MIN_LOG_LEVEL'] = '3'
warnings.filterwarnings('ignore')

import cv2
import numpy as np
import time
import argparse
import sys
from typing import Optional

from doomslayer.core.detector import DoomscrollDetector
from doomslayer.core.monitor import Monitor
from doomslayer.core.result import DetectionResult
from doomslayer.core.session import format_time
from doomslayer.core.types import Box, Classification
from doomslayer.core.video_capture import VideoCapture
from doomslayer.utils.config import config, SENSITIVITY_MIN, SENSITIVITY_MAX
from doomslayer.utils.logger import logger

STATE_COLORS = {
    Classification.CALIBRATING: (0, 200, 255),
    Classification.MONITORING: (200, 200, 200),
    Classification.NORMAL: (0, 200, 0),
    Classification.DOOMSCROLLING: (0, 0, 255),
    Classification.NO_FACE: (128, 128, 128),
    Classification.ERROR: (0, 0, 180),
}

SENSITIVITY_STEP = 0.05


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Real-time Doomscrolling Detection")

    parser.add_argument("--camera", "-c", type=int, default=None,
                        help="Camera device index (default: 0)")
    parser.add_argument("--width", "-w", type=int, default=None,
                        help="Frame width (default: 640)")
    parser.add_argument("--height", type=int, default=None,
                        help="Frame height (default: 480)")
    parser.add_argument("--sensitivity", "-s", type=float, default=None,
                        help=f"Detection sensitivity, {SENSITIVITY_MIN}-{SENSITIVITY_MAX} (default: 0.55)")
    parser.add_argument("--threshold", "-t", type=int, default=None,
                        help="Consecutive frames needed to change state (default: 3)")
    parser.add_argument("--config", type=str, default="",
                        help="JSON configuration file (optional)")
    parser.add_argument("--session-id", type=str, default="",
                        help="Session ID for tracking (optional)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose output")
    parser.add_argument("--no-display", action="store_true",
                        help="Disable video display (headless mode)")

    return parser.parse_args()


def apply_config_defaults(args):
    """Fill options not given on the command line from the loaded configuration."""
    if args.camera is None:
        args.camera = config.camera.device_id
    if args.width is None:
        args.width = config.camera.width
    if args.height is None:
        args.height = config.camera.height
    if args.sensitivity is None:
        args.sensitivity = config.detection.sensitivity
    if args.threshold is None:
        args.threshold = config.detection.detection_threshold
    return args


def draw_box(frame: np.ndarray, box: Optional[Box], color: tuple, label: str = "") -> None:
    if box is None:
        return
    x1, y1 = int(box.x), int(box.y)
    x2, y2 = int(box.x + box.width), int(box.y + box.height)
    cv2.rectangle(frame, (x1, y1), (x2, y2), color, 2)
    if label:
        cv2.putText(frame, label, (x1, max(15, y1 - 8)), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)


def draw_results(frame: np.ndarray, result: DetectionResult, monitor: Monitor) -> np.ndarray:
    """Draw detection state, boxes and session stats on a copy of the frame."""
    output_frame = frame.copy()
    h, w = output_frame.shape[:2]
    color = STATE_COLORS.get(result.classification, (255, 255, 255))

    draw_box(output_frame, result.face_box, color)
    draw_box(output_frame, result.phone_box, (0, 0, 255), "PHONE")

    # Status panel
    cv2.rectangle(output_frame, (0, 0), (w, 60), (0, 0, 0), -1)
    cv2.putText(output_frame, result.message, (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
    if monitor.last_feedback:
        cv2.putText(output_frame, monitor.last_feedback, (10, 50),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    session = monitor.session
    stats = (f"Focused {format_time(session.focused_seconds)} | "
             f"Distracted {format_time(session.distracted_seconds)} | "
             f"Alerts {session.alert_count} | "
             f"Sens {monitor.detector.sensitivity:.2f} | FPS {result.debug.fps}")
    cv2.putText(output_frame, stats, (10, h - 10), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (255, 255, 255), 1)

    return output_frame


def print_status(result: Optional[DetectionResult], tick_count: int, verbose: bool = False):
    """Print status information."""
    if result is None:
        return

    if verbose:
        debug = result.debug
        print(f"Tick {tick_count:5d} | FPS: {debug.fps:3d} | {result.state:<14} | "
              f"Score: {debug.score:5.2f} (raw {debug.raw_score}) | "
              f"V: {debug.vertical_offset:+.3f} H: {debug.horizontal_offset:+.3f} "
              f"R: {debug.rotation_offset:+.3f} | Phone: {debug.phone_score:.2f}")
    elif tick_count % 10 == 0:  # once a second at 10 Hz
        print(f"{result.state}: {result.message}")


def print_session_summary(monitor: Monitor) -> None:
    summary = monitor.session.get_session_summary()
    print("\n" + "=" * 60)
    print("SESSION SUMMARY")
    print("=" * 60)
    print(f"Session ID: {summary['session_id']}")
    print(f"Duration: {summary['session_duration']:.1f} seconds")
    print(f"Focused: {summary['focused_time']}")
    print(f"Distracted: {summary['distracted_time']}")
    print(f"Focus Percentage: {summary['focus_percentage']:.1f}%")
    print(f"Doomscroll Alerts: {summary['alert_count']}")
    print("=" * 60)


def handle_key(key: int, monitor: Monitor) -> bool:
    """Apply a key press; returns False when the user asked to quit."""
    detector = monitor.detector
    if key == ord('q'):
        return False
    if key == ord('r'):
        monitor.reset_stats()
        print("Stats reset, recalibrating...")
    elif key == ord('c'):
        detector.recalibrate()
        print("Recalibrating...")
    elif key in (ord('+'), ord('=')):
        detector.set_sensitivity(detector.sensitivity + SENSITIVITY_STEP)
        print(f"Sensitivity: {detector.sensitivity:.2f}")
    elif key in (ord('-'), ord('_')):
        detector.set_sensitivity(detector.sensitivity - SENSITIVITY_STEP)
        print(f"Sensitivity: {detector.sensitivity:.2f}")
    return True


def main():
    """Main function."""
    args = parse_arguments()

    if args.config and not config.load_from_file(args.config):
        print(f"Failed to load configuration: {args.config}")
        sys.exit(1)
    apply_config_defaults(args)

    # Enable verbose logging if requested
    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)
    else:
        logging.getLogger().setLevel(logging.ERROR)

    logger.log_system_info()

    print("=" * 60)
    print("Doomslayer - Real-time Doomscrolling Detection")
    print("=" * 60)
    print(f"Camera: {args.camera}")
    print(f"Resolution: {args.width}x{args.height}")
    print(f"Sensitivity: {args.sensitivity}")
    print(f"Detection Threshold: {args.threshold}")
    print(f"Session ID: {args.session_id or 'auto-generated'}")
    print("=" * 60)

    try:
        detector = DoomscrollDetector(sensitivity=args.sensitivity, detection_threshold=args.threshold)
    except ValueError as e:
        print(f"✗ Invalid detector settings: {e}")
        sys.exit(1)

    print("Initializing detection models...")
    if not detector.initialize():
        print("✗ No detection model could be loaded. Exiting.")
        sys.exit(1)
    print("✓ Detector initialized")

    try:
        cap = VideoCapture(args.camera, args.width, args.height)
    except RuntimeError as e:
        print(f"✗ Error: {e}")
        detector.close()
        sys.exit(1)
    print(f"✓ Camera initialized: {args.width}x{args.height}")

    tick_interval = 1.0 / config.camera.tick_hz
    tick_count = 0
    perf_log_every = max(1, int(round(config.camera.tick_hz)))

    def on_result(result: DetectionResult) -> None:
        nonlocal tick_count
        tick_count += 1
        print_status(result, tick_count, args.verbose)
        if tick_count % perf_log_every == 0:
            logger.log_performance(result.debug.fps, monitor.last_latency_ms)

    monitor = Monitor(detector, cap, tick_interval_sec=tick_interval, on_result=on_result)
    if args.session_id:
        monitor.session.session_id = args.session_id

    print("\nLook at your screen normally while calibrating...")
    if args.no_display:
        print("Press Ctrl+C to stop.\n")
    else:
        print("Keys: q quit | r reset stats | c recalibrate | +/- sensitivity\n")

    try:
        if args.no_display:
            monitor.start()
            while monitor.is_running:
                time.sleep(0.5)
        else:
            # OpenCV windows must be driven from the main thread
            while True:
                started = time.monotonic()
                result = monitor.run_once()
                if result is not None and monitor.last_frame is not None:
                    cv2.imshow("Doomslayer", draw_results(monitor.last_frame, result, monitor))

                wait_ms = max(1, int((tick_interval - (time.monotonic() - started)) * 1000))
                key = cv2.waitKey(wait_ms) & 0xFF
                if not handle_key(key, monitor):
                    break

    except KeyboardInterrupt:
        print("\nMonitoring interrupted by user")
    finally:
        monitor.stop()
        cap.release()
        detector.close()
        cv2.destroyAllWindows()

        session_file = monitor.session.save_session_data()
        if session_file:
            print(f"Session data saved: {session_file}")
        print_session_summary(monitor)

        print("Monitoring ended")


if __name__ == "__main__":
    main()
