#!/usr/bin/env python3
"""Script to build a single-file led-migrate executable."""

import os
import sys
import shutil
import subprocess
from pathlib import Path

def clean_build():
    """Clean build directories."""
    print("Cleaning build directories...")
    for dir_name in ['build', 'dist']:
        if os.path.exists(dir_name):
            shutil.rmtree(dir_name)

    for spec_file in Path('.').glob('*.spec'):
        spec_file.unlink()

def build_executable():
    """Build the executable using PyInstaller."""
    print("Building executable...")

    cmd = [
        'pyinstaller',
        '--name=led-migrate',
        '--onefile',
        '--clean',
        '--paths=src',
        'src/led_migrate/cli.py'
    ]
    subprocess.run(cmd, check=True)

    print("\nBuild complete!")
    print("Executable location:")
    print("  dist/led-migrate")

def main():
    """Main build script."""
    if sys.platform == 'win32':
        print("led-migrate drives Linux containers and is built for Linux and macOS only",
              file=sys.stderr)
        sys.exit(1)
    try:
        clean_build()
        build_executable()
    except subprocess.CalledProcessError as e:
        print(f"Error during build: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == '__main__':
    main()
