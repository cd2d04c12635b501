#!/usr/bin/env python3
"""Bullseye configuration health check."""

import os
import sys

# Add project to path
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from config import settings


def check_credentials():
    """Report whether a Gemini credential is configured."""
    print("\n🔑 Credential Check")
    print("=" * 70)

    for name in settings.API_KEY_ENV_VARS:
        status = "✓ set" if (os.getenv(name) or "").strip() else "- unset"
        print(f"  {name:20} {status}")

    if settings.get_api_key():
        print("\n✓ A credential is available.")
        return True

    print("\n✗ No credential found. Set GEMINI_API_KEY in the environment or in .env.")
    return False


def check_settings():
    """Print the effective request settings."""
    print("\n⚙ Request Settings")
    print("=" * 70)
    print(f"  Model:              {settings.GEMINI_MODEL}")
    print(f"  Temperature:        {settings.TEMPERATURE}")
    print(f"  Timeout (s):        {settings.REQUEST_TIMEOUT_SECONDS:g}")
    print(f"  Structured output:  {settings.STRUCTURED_OUTPUT}")
    print(f"  Max instruments:    {settings.MAX_INSTRUMENTS}")

    valid = settings.REQUEST_TIMEOUT_SECONDS > 0 and 0 <= settings.TEMPERATURE <= 2
    if not valid:
        print("\n✗ Timeout must be positive and temperature between 0 and 2.")
    return valid


def check_logs():
    """Check recent log entries for errors."""
    print("\n📋 Recent Log Entries (last 10)")
    print("=" * 70)

    log_file = os.path.join(settings.LOGS_DIR, "bullseye.log")
    if not os.path.exists(log_file):
        print("  No log file found yet.")
        return True

    try:
        with open(log_file, "r", encoding="utf-8") as f:
            lines = f.readlines()[-10:]
    except OSError as e:
        print(f"  Error reading logs: {e}")
        return False

    for line in lines:
        print(f"  {line.rstrip()}")
    return True


def main():
    """Run all checks."""
    print("\n" + "=" * 70)
    print("  Bullseye Health Check")
    print("=" * 70)

    checks = [
        ("Credentials", check_credentials),
        ("Settings", check_settings),
        ("Log Health", check_logs),
    ]

    all_pass = True
    for name, check_func in checks:
        if not check_func():
            print(f"\n❌ {name} check failed.")
            all_pass = False

    print("\n" + "=" * 70)
    if all_pass:
        print("✓ All checks passed. Bullseye is ready to sync.")
    else:
        print("⚠ Some checks failed. Review above for details.")
    print("=" * 70 + "\n")

    return 0 if all_pass else 1


if __name__ == "__main__":
    sys.exit(main())
