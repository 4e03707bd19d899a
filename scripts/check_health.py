#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Health Checker CLI Tool
Quick script to check the worklog API health and master data
"""
import sys
from pathlib import Path

# Fix encoding for Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

# Add src to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


def _base_url():
    from config import API_PORT
    return f"http://localhost:{API_PORT}"


def check_health():
    """Check API health via HTTP endpoint"""
    import requests

    url = f"{_base_url()}/health"

    print("\n" + "="*80)
    print("WORKLOG SHEET SYNC - HEALTH CHECK")
    print("="*80 + "\n")

    try:
        response = requests.get(url, timeout=5)
        data = response.json()
    except requests.exceptions.ConnectionError:
        print("❌ Cannot connect to API")
        print(f"   Is it running? Check {url}\n")
        return False
    except requests.exceptions.Timeout:
        print("❌ Health check timed out")
        return False
    except ValueError as e:
        print(f"❌ Invalid response: {str(e)}\n")
        return False

    status = data.get('status', 'unknown')
    if status == 'healthy':
        print("✅ Status: HEALTHY")
    elif status == 'degraded':
        print("⚠️  Status: DEGRADED")
    else:
        print("❌ Status: UNHEALTHY")
    print(f"   Version: {data.get('version', '?')}")

    components = data.get('components', {})
    print("\n🔗 Components:")
    print(f"   Config:        {components.get('config', '?')}")
    print(f"   Google Sheets: {components.get('sheets', '?')}")

    cache = components.get('master_data_cache')
    if isinstance(cache, dict):
        if cache.get('exists'):
            validity = 'valid' if cache.get('is_valid') else 'stale'
            print(f"   Master data:   cached {int(cache.get('age_seconds') or 0)}s ago ({validity})")
        else:
            print("   Master data:   not loaded yet")

    print("\n" + "="*80 + "\n")
    return status == 'healthy'


def check_master_data():
    """Show how many employees and products the API currently serves"""
    import requests

    try:
        response = requests.get(f"{_base_url()}/master-data", timeout=30)
        data = response.json()
    except requests.exceptions.RequestException as e:
        print(f"❌ Could not fetch master data: {str(e)}\n")
        return False

    if response.status_code != 200:
        detail = data.get('detail', {})
        if isinstance(detail, dict):
            print(f"❌ {detail.get('error_type')}: {detail.get('message')}")
            print(f"   {detail.get('user_action')}\n")
        else:
            print(f"❌ {detail}\n")
        return False

    print("="*80)
    print("MASTER DATA")
    print("="*80 + "\n")
    print(f"👥 Employees: {len(data.get('employees', []))}")
    print(f"📦 Products:  {len(data.get('products', []))}")
    print("\n" + "="*80 + "\n")
    return True


def main():
    """Main CLI entry point"""
    if len(sys.argv) > 1:
        command = sys.argv[1].lower()

        if command == 'master-data':
            ok = check_master_data()
            sys.exit(0 if ok else 1)
        else:
            print("Usage: python check_health.py [master-data]")
            print("\nCommands:")
            print("  (none)       - Check health status")
            print("  master-data  - Show master data counts")
            sys.exit(1)
    else:
        # Default: health check
        is_healthy = check_health()
        sys.exit(0 if is_healthy else 1)


if __name__ == "__main__":
    main()
