"""
Setup script to install the face detection model
Run this FIRST before starting the main application
"""
import shutil
from pathlib import Path

import cv2

from config.settings import DETECTION_SETTINGS, MODELS_DIR


def setup_models():
    """Copy the cascade model shipped with OpenCV into the models directory"""
    print("="*60)
    print("Setting up Live Face Blur")
    print("="*60)

    MODELS_DIR.mkdir(parents=True, exist_ok=True)

    model_path = Path(DETECTION_SETTINGS['model_path'])
    source = Path(DETECTION_SETTINGS['fallback_model_path'])

    print("\n[1/1] Installing face detection model...")
    print(f"Target: {model_path}")

    if model_path.exists():
        print("✓ Model already exists, skipping")
    elif not source.exists():
        print(f"✗ OpenCV model not found: {source}")
        print("\nManual download instructions:")
        print("1. Go to: https://github.com/opencv/opencv/tree/4.x/data/haarcascades")
        print(f"2. Save {DETECTION_SETTINGS['model_name']} to: {model_path}")
        return False
    else:
        shutil.copy(source, model_path)
        print(f"✓ Model saved to {model_path}")

    if cv2.CascadeClassifier(str(model_path)).empty():
        print(f"✗ Model could not be loaded: {model_path}")
        return False

    print("\n" + "="*60)
    print("Setup complete! You can now run main.py")
    print("="*60)
    return True


if __name__ == "__main__":
    setup_models()
