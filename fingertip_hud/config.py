"""
Configuration module for Fingertip HUD.

This module contains all configuration parameters and constants used throughout the tracker.
Components read these defaults but accept explicit overrides in their constructors,
so a value can be tuned here once or per instance in tests.

PERFORMANCE TUNING:
- For lower latency: reduce MediaPipeConfig.PROCESSING_SCALE (detection runs on a smaller copy)
- For smoother anchoring: keep WorkerConfig.JOB_QUEUE_MAXSIZE=1 so stale frames are dropped
- If the HUD jumps when depth is noisy: raise DepthConfig.CONFIDENCE_FLOOR
"""


# ==================== Inference / Selection Configuration ====================
class TrackingConfig:
    """Per-frame inference gating and candidate selection."""

    # Minimum time between two hand inferences (seconds). 0.033 targets ~30 Hz.
    MIN_INFERENCE_INTERVAL = 0.033

    # Joint whose confidence ranks the hands and whose position drives the anchor
    ANCHOR_JOINT = "thumb_ip"

    # Joints must be strictly above this confidence to be used (0-1)
    MIN_JOINT_CONFIDENCE = 0.2

    # Maximum number of hands requested from the detector
    MAX_NUM_HANDS = 2


# ==================== Depth Sampling Configuration ====================
class DepthConfig:
    """Configuration for the depth buffer sampler."""

    # Lower bound applied to normalized confidence (0-1) so that low-confidence
    # pixels are down-weighted instead of zeroed out
    CONFIDENCE_FLOOR = 0.05

    # Maximum raw confidence value of an 8-bit confidence buffer
    CONFIDENCE_MAX = 255.0


# ==================== Projection Configuration ====================
class ProjectionConfig:
    """Configuration for screen point to world point projection."""

    # Distance along the camera ray used when no depth is available (meters)
    FIXED_DISTANCE = 0.45

    # Rays shorter than this before normalization are treated as degenerate
    MIN_RAY_LENGTH = 1e-9


# ==================== HUD Configuration ====================
class HudConfig:
    """Configuration for the HUD plane and its touch-driven dot."""

    # Visible plane size (meters)
    PLANE_WIDTH = 0.025
    PLANE_HEIGHT = 0.025

    # Plane offset above the anchor along world +Y (meters)
    VERTICAL_OFFSET = 0.075

    # Lift of the dot above the plane surface (meters)
    DOT_LIFT = 0.001

    # Keep the plane facing the viewer
    BILLBOARD = True


# ==================== Debug Visualizer Configuration ====================
class DebugConfig:
    """Configuration for the per-joint debug markers."""

    # Feature flag for joint markers (off by default)
    VISUALIZE_HAND_JOINTS = False

    # Depth at which a marker is drawn at unit scale (meters)
    REFERENCE_DEPTH = 0.45

    # Depths below this are treated as this value when computing scale (meters)
    MIN_DEPTH = 0.05

    # Marker scale clamp
    MIN_SCALE = 0.15
    MAX_SCALE = 0.75


# ==================== Touch Configuration ====================
class TouchConfig:
    """Configuration for remote touch sample consumption."""

    # Sampling tick for keep-latest consumption (seconds). 1/60 ~= 16 ms.
    SAMPLE_INTERVAL = 1.0 / 60.0

    # Capacity of the bounded touch channel (older samples are dropped)
    CHANNEL_CAPACITY = 8

    # Payload kind tag and current schema version
    PAYLOAD_KIND = "pad-coordinates"
    SCHEMA_VERSION = 1


# ==================== Worker Thread Configuration ====================
class WorkerConfig:
    """Configuration for background worker threads."""

    # Queue sizes
    JOB_QUEUE_MAXSIZE = 1
    COMPLETION_QUEUE_MAXSIZE = 32

    # Queue timeout (seconds)
    QUEUE_TIMEOUT = 0.1

    # Thread shutdown timeout (seconds)
    THREAD_SHUTDOWN_TIMEOUT = 2.0


# ==================== MediaPipe Hand Detection Configuration ====================
class MediaPipeConfig:
    """Configuration for MediaPipe hand tracking."""

    # Hand detection parameters
    MODEL_COMPLEXITY = 1
    MIN_DETECTION_CONFIDENCE = 0.5
    MIN_TRACKING_CONFIDENCE = 0.5

    # Processing scale for detection (smaller = faster but less accurate)
    PROCESSING_SCALE = 0.5


# ==================== Camera Configuration ====================
class CameraConfig:
    """Camera capture configuration parameters for the demo shell."""

    # Default camera resolution (lower = faster)
    DEFAULT_WIDTH = 1280
    DEFAULT_HEIGHT = 720

    # Camera buffer size (reduce latency)
    BUFFER_SIZE = 1

    # Target FPS for camera (actual may vary by camera capability)
    TARGET_FPS = 30

    # Horizontal field of view used to estimate pinhole intrinsics (degrees)
    HORIZONTAL_FOV_DEG = 60.0

    # Size of the synthetic depth buffer when fake depth is enabled (width, height)
    FAKE_DEPTH_SIZE = (256, 192)

    # Camera backend to use (None lets OpenCV choose)
    BACKEND = None


# ==================== UI Configuration ====================
class UIConfig:
    """Configuration for the demo overlay."""

    WINDOW_NAME = "Fingertip HUD"

    # Colors (BGR format)
    COLOR_GREEN = (0, 255, 0)
    COLOR_YELLOW = (0, 255, 255)
    COLOR_WHITE = (255, 255, 255)
    COLOR_CYAN = (255, 255, 0)

    # Text display
    FONT_SCALE = 0.6
    FONT_THICKNESS = 2

    # Pixel radius of a debug marker at unit scale
    MARKER_PIXEL_RADIUS = 14
