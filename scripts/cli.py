"""
CLI to detect the dominant expression in a still image -> JSON.
"""
from __future__ import annotations
import argparse, json, logging
from moodcam.config import Settings
from moodcam.pipeline import analyze_image_pipeline

def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument("--image", required=True, help="Path to input image")
    p.add_argument("--out", default=None, help="Optional path for the annotated image")
    p.add_argument("--backend", default=None, help="DeepFace detector backend (default: DETECTOR_BACKEND)")
    args = p.parse_args(argv)

    settings = Settings() if args.backend is None else Settings(DETECTOR_BACKEND=args.backend)
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
    result = analyze_image_pipeline(args.image, settings, out_path=args.out)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    if args.out:
        print(f"Annotated image written to {args.out}")
    return result

if __name__ == "__main__":
    main()
