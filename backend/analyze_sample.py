"""
Quick script to run extraction and photo quality checks on local files.

Usage:
    python analyze_sample.py --text ocr_output.txt
    python analyze_sample.py --image selfie.jpg
    python analyze_sample.py --text ocr_output.txt --image selfie.jpg
"""

import argparse
import json
import sys

from models.photo_quality_model import InvalidFrameError
from services.verification_service import assess_photo, extract_identity


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Analyse a document text and/or a selfie image")
    parser.add_argument("--text", help="file with recognized document text (UTF-8)")
    parser.add_argument("--image", help="selfie image file (JPEG/PNG)")
    args = parser.parse_args(argv)

    if not args.text and not args.image:
        parser.print_usage()
        return 1

    result = {}
    if args.text:
        with open(args.text, encoding="utf-8") as f:
            result["document"] = extract_identity(f.read())

    if args.image:
        with open(args.image, "rb") as f:
            data = f.read()
        try:
            result["photo_quality"] = assess_photo(data)
        except InvalidFrameError as e:
            print(f"❌ {args.image}: {e}")
            return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
