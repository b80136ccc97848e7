"""
Configuration settings for the Live Face Blur pipeline
"""
from pathlib import Path

import cv2

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent
MODELS_DIR = BASE_DIR / "models"
DATA_DIR = BASE_DIR / "data"
LOGS_DIR = DATA_DIR / "logs"

# ============================================================================
# CAMERA SETTINGS
# ============================================================================
CAMERA_SETTINGS = {
    'default_source': 0,  # 0 for webcam, or a device path / stream URL
    'fps': 30,
    'resolution': (640, 480),  # (width, height)
    'fourcc': 'MJPG',
    'jpeg_quality': 90,  # Used only when the backend hands back decoded frames
}

# ============================================================================
# FACE DETECTION SETTINGS
# ============================================================================
DETECTION_SETTINGS = {
    'model_name': 'haarcascade_frontalface_default.xml',
    'model_path': str(MODELS_DIR / 'haarcascade_frontalface_default.xml'),
    'fallback_model_path': cv2.data.haarcascades + 'haarcascade_frontalface_default.xml',

    # Detection runs at this resolution; equal to capture resolution
    # selects the fast path (no resizing)
    'resolution': (640, 480),  # (width, height)

    'min_face_size': 20,  # Pixels, in detection space
    'score_threshold': 0.0,  # Minimum cascade level weight (0 = disabled)
    'pyramid_scale_factor': 0.7,  # Each pyramid level shrinks by this factor
    'min_neighbors': 5,
}

# ============================================================================
# PRIVACY SETTINGS
# ============================================================================
PRIVACY_SETTINGS = {
    'blur_intensity': 5.0,  # Gaussian sigma
}

# ============================================================================
# DISPLAY SETTINGS
# ============================================================================
DISPLAY_SETTINGS = {
    'window_title': 'capture',
    'show_window': True,
    'quit_keys': (27, ord('q')),  # ESC, q
}

# ============================================================================
# PIPELINE SETTINGS
# ============================================================================
PIPELINE_SETTINGS = {
    'mode': 'lockstep',  # 'lockstep' or 'decoupled'
    'max_read_failures': 30,  # Consecutive camera read failures before exit
    'stats_interval': 100,  # Log statistics every N frames
    'slot_timeout': 1.0,  # Seconds to wait on the hand-off slot
}

# ============================================================================
# LOGGING SETTINGS
# ============================================================================
LOGGING_SETTINGS = {
    'level': 'INFO',  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'datefmt': '%Y-%m-%d %H:%M:%S',
    'file': str(LOGS_DIR / 'system.log'),
    'max_bytes': 10 * 1024 * 1024,  # 10 MB
    'backup_count': 5,
}
