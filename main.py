#!/usr/bin/env python3
"""Image Uploader - エントリーポイント"""
import sys

from image_uploader import ImageUploader


def main():
    """メイン関数"""
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    try:
        uploader = ImageUploader(config_path)
        successful, failed = uploader.run()

        exit_code = 0 if failed == 0 else 1
        sys.exit(exit_code)

    except (FileNotFoundError, ValueError, RuntimeError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
