#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fastpath.config.loader import CONFIG_FILENAME, ConfigLoader
from fastpath.config.validation import ConfigValidator, ValidationError


def validate_config_dir(config_dir: Optional[Path] = None) -> list[ValidationError]:
    """Validate the merged configuration for a config directory."""
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config()
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)
    config_file = loader.config_dir / CONFIG_FILENAME

    print("🔍 Validating FastPath configuration...")
    if config_file.exists():
        print(f"📄 Using {config_file}")
    else:
        print(f"📄 No {CONFIG_FILENAME} in {loader.config_dir}, checking defaults only")

    try:
        errors = validate_config_dir(config_dir)
    except Exception as e:
        print(f"❌ Error loading configuration: {e}")
        sys.exit(1)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        sys.exit(1)

    config = loader.load()
    print(f"✅ Storage: {config.storage.backend} ({config.storage.db_path})")
    print(f"✅ Tick interval: {config.timer.tick_interval_seconds}s")
    print(f"✅ Custom goals: {config.goals.min_custom_hours}h to {config.goals.max_custom_hours}h")
    print(f"✅ Live surface: {config.live_surface.method} "
          f"({'enabled' if config.live_surface.enabled else 'disabled'})")

    print("\n🎉 All configuration validation passed!")
    sys.exit(0)


if __name__ == "__main__":
    main()
