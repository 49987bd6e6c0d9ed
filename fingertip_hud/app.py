"""
Fingertip HUD - Demo shell.

Captures webcam frames, tracks the most confident hand and draws a small HUD panel
anchored above its thumb. Dragging the mouse over the window acts as the remote
touch pad and moves the dot on the panel.
"""

import logging
import signal
import threading
import time

import cv2 as cv

from fingertip_hud.args_parser import get_args
from fingertip_hud.config import UIConfig
from fingertip_hud.context import TrackingContext
from fingertip_hud.core.camera_thread import FrameSource
from fingertip_hud.core.session import SessionStatus
from fingertip_hud.core.tracker import HandAnchorTracker
from fingertip_hud.touch.messages import TouchSample
from fingertip_hud.ui.display import draw_hud, draw_joint_markers, draw_ui_overlay, setup_camera

logger = logging.getLogger(__name__)


def setup_signal_handler(stop_event):
    """
    Setup signal handler for graceful shutdown.

    Args:
        stop_event (threading.Event): Event to signal on interrupt
    """
    def signal_handler(sig, frame):
        logger.info("Signal received, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)


def make_mouse_handler(tracker, image_size):
    """
    Mouse callback that turns a left-button drag into touch samples.

    Args:
        tracker (HandAnchorTracker): Receives the samples
        image_size (list): Mutable [width, height] of the displayed image
    """
    pressed = {"down": False}

    def on_mouse(event, x, y, flags, param):
        if event == cv.EVENT_LBUTTONDOWN:
            pressed["down"] = True
        elif event == cv.EVENT_LBUTTONUP:
            pressed["down"] = False
        elif event != cv.EVENT_MOUSEMOVE or not pressed["down"]:
            return

        width, height = image_size
        if width <= 0 or height <= 0:
            return
        # Pad y grows upwards, window y grows downwards
        tracker.on_touch(TouchSample(x / width, 1.0 - y / height, time.time()))

    return on_mouse


def handle_keyboard_input(waitkey, stop_event, tracker):
    """
    Handle keyboard input for user controls.

    Returns:
        bool: True if should continue, False if should exit
    """
    if waitkey == 27 or waitkey == ord('q'):
        logger.info('Exiting...')
        stop_event.set()
        return False

    if waitkey == ord('j'):
        tracker.visualizer.enabled = not tracker.visualizer.enabled
        if not tracker.visualizer.enabled:
            tracker.visualizer.clear()
        logger.info(f"Joint markers {'on' if tracker.visualizer.enabled else 'off'}")

    if waitkey == ord('r'):
        tracker.hud.clear_anchor()
        tracker.scheduler.reset()

    return True


def run_main_loop(source, tracker, context, stop_event):
    """
    Render loop: offer frames to the tracker, apply its results and draw the HUD.
    """
    image_size = [0, 0]
    cv.namedWindow(UIConfig.WINDOW_NAME)
    cv.setMouseCallback(UIConfig.WINDOW_NAME, make_mouse_handler(tracker, image_size))

    fps_state = {'display_count': 0, 'start_time': time.time(), 'display_fps': 0.0}

    while not stop_event.is_set():
        frame = source.next_frame()
        if frame is None:
            if cv.waitKey(1) & 0xFF == ord('q'):
                break
            continue

        image_size[0], image_size[1] = frame.image_size
        tracker.on_frame(frame)
        snapshot = tracker.tick()

        if snapshot.anchor is not None and context.session.status is SessionStatus.READY:
            context.session.update(SessionStatus.TRACKING)

        display_img = frame.color_image.copy()
        draw_hud(display_img, snapshot, frame)
        draw_joint_markers(display_img, tracker.visualizer, frame)
        fps_state = draw_ui_overlay(
            display_img, context.session.status.message, fps_state, tracker.last_result
        )

        cv.imshow(UIConfig.WINDOW_NAME, display_img)
        waitkey = cv.waitKey(1) & 0xFF
        if not handle_keyboard_input(waitkey, stop_event, tracker):
            break


def main():
    args = get_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Imported here so that --help works without loading MediaPipe
    from fingertip_hud.detection.hand_detector import MediaPipeHandDetector

    def on_status(status, message):
        logger.info(f"[{status.value}] {message}")

    context = TrackingContext(status_handler=on_status)
    context.load_args(args)
    context.session.update(SessionStatus.CHECKING_PREREQUISITES)

    cam_port = context.camera_port if context.camera_port is not None else 0
    cap = setup_camera(cam_port)
    if not cap.isOpened():
        context.session.update(SessionStatus.NOT_SUPPORTED, f"cannot open camera {cam_port}")
        cap.release()
        return 1

    context.detector = MediaPipeHandDetector()
    tracker = HandAnchorTracker(context)
    source = FrameSource(cap, context.horizontal_fov, context.fake_depth, context.clock)

    stop_event = threading.Event()
    setup_signal_handler(stop_event)

    context.session.update(SessionStatus.READY)
    tracker.start()
    logger.info("Controls: drag mouse = touch pad, 'j'=toggle joint markers, 'r'=reset anchor, 'q'=quit")

    try:
        run_main_loop(source, tracker, context, stop_event)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received, shutting down...")
        stop_event.set()
    finally:
        logger.info("Cleaning up resources...")
        tracker.stop()
        context.detector.close()
        cap.release()
        cv.destroyAllWindows()
        logger.info("Cleanup complete")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
