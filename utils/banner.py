import os
import subprocess
from datetime import datetime, timezone

# Global flag to ensure banner is only shown once
_banner_shown = False


def get_git_info():
    """Get git commit hash and commit date"""
    try:
        git_hash = subprocess.check_output(['git', 'rev-parse', 'HEAD'],
                                           stderr=subprocess.DEVNULL).decode().strip()[:8]
        git_date = subprocess.check_output(['git', 'show', '-s', '--format=%ci', 'HEAD'],
                                           stderr=subprocess.DEVNULL).decode().strip()
        return git_hash, git_date
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown", "unknown"


def get_build_info():
    """Get build information from environment (set during Docker build)"""
    build_time = os.environ.get('BUILD_TIME')
    git_hash_env = os.environ.get('GIT_HASH')

    if build_time is None:
        build_time = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')

    return build_time, git_hash_env


def describe_integrations():
    """One line per external service: configured or not"""
    def state(name):
        return 'configured' if os.environ.get(name) else 'not configured'

    return [
        ('Stripe', state('STRIPE_SECRET_KEY')),
        ('Webhook secret', state('STRIPE_WEBHOOK_SECRET')),
        ('Playback URL', state('STREAM_PLAYBACK_URL')),
        ('Identity API', state('IDENTITY_API_URL')),
        ('Mail', state('MAIL_SERVER')),
    ]


def print_startup_banner():
    """Print a startup banner with build and integration info"""
    global _banner_shown

    # Only show banner once
    if _banner_shown:
        return
    _banner_shown = True

    git_hash, git_date = get_git_info()
    build_time, git_hash_env = get_build_info()
    display_hash = git_hash_env[:8] if git_hash_env else git_hash

    print("\033[96m" + "  concert-stream" + "\033[0m")
    print("\033[94m" + "=" * 70 + "\033[0m")
    print("\033[92mBuild Info:\033[0m")
    print(f"   Build Time: {build_time}")
    print(f"   Git Hash:   {display_hash}")
    if git_date != "unknown":
        print(f"   Git Date:   {git_date}")
    print("\033[92mIntegrations:\033[0m")
    for name, state in describe_integrations():
        print(f"   {name + ':':<16}{state}")
    print("\033[94m" + "=" * 70 + "\033[0m")
    print()
