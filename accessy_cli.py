"""
Accessy Command Line Client.

Enrolls this machine as an Accessy device and operates the user's doors.

Usage:
    python accessy_cli.py enroll --phone +46701234567 --device-name "Laptop"
    python accessy_cli.py doors
    python accessy_cli.py unlock <door-id>
    python accessy_cli.py nearest 57.7089 11.9746
    python accessy_cli.py favorite <door-id> [--off]
    python accessy_cli.py login
    python accessy_cli.py logout

State (keys and credentials) is kept under --data-dir.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from api.client import AccessyApiClient, ApiError
from config.accessy_config import ACCESSY_CONSTANTS, ACCESSY_PATHS
from protocols.core.exceptions import AccessyCryptoError
from services.doors_service import DoorsService, DoorsServiceError
from services.enrollment_service import EnrollmentError, EnrollmentService
from utils.credentials_store import CredentialsNotFoundError, FileCredentialsStore
from utils.key_store import FileKeyStore, KeyStoreError
from utils.logger import AccessyLogger


class AccessyCli:
    """Wires the stores and services for one data directory."""

    def __init__(self, data_dir, transport):
        data_dir = Path(data_dir)
        self.key_store = FileKeyStore(data_dir / ACCESSY_PATHS.KEYS.name)
        self.credentials_store = FileCredentialsStore(
            data_dir / ACCESSY_PATHS.CREDENTIALS.name / ACCESSY_PATHS.CREDENTIALS_FILE.name,
            self.key_store,
        )
        self.enrollment = EnrollmentService(transport, self.key_store, self.credentials_store)
        self.doors = DoorsService(transport, self.key_store)

    # ========================================================================
    # COMMANDS
    # ========================================================================

    def enroll(self, phone, device_name, code=None, recovery_key=None, prompt=None):
        prompt = prompt or input
        verification_code_id = self.enrollment.request_verification_code(phone)
        if code is None:
            code = prompt("📱 Verification code: ").strip()

        token = self.enrollment.submit_verification_code(code, verification_code_id)

        if token.recoveryKeyRequired:
            if recovery_key is None:
                recovery_key = prompt("🔑 Recovery key: ").strip()
            if not self.enrollment.validate_recovery_key(recovery_key, token.token):
                print("❌ Invalid recovery key")
                return 1
        else:
            recovery_key = None

        credentials = self.enrollment.enroll_device_and_login(device_name, recovery_key, token)
        mode = " (demo)" if credentials.isDemoMode else ""
        print(f"✅ Device {credentials.deviceId} enrolled{mode}")
        return 0

    def login(self):
        credentials = self.enrollment.login(self.credentials_store.load())
        print(f"✅ Logged in as device {credentials.deviceId}")
        return 0

    def list_doors(self):
        doors = self.doors.get_doors(self.credentials_store.load())
        if not doors:
            print("No doors available")
            return 0

        for door in doors:
            star = "★" if door.favorite else " "
            operations = ", ".join(op.name or op.id for op in door.operations) or "-"
            print(f"{star} {door.publicationId}  {door.name}  [{operations}]")
        return 0

    def unlock(self, door_id):
        self.doors.unlock_door(door_id, self.credentials_store.load())
        print(f"🔓 Unlocked {door_id}")
        return 0

    def unlock_nearest(self, latitude, longitude):
        door = self.doors.unlock_nearest(self.credentials_store.load(), latitude, longitude)
        print(f"🔓 Unlocked {door.name}")
        return 0

    def favorite(self, door_id, is_favorite):
        credentials = self.credentials_store.load()
        door = next((d for d in self.doors.get_doors(credentials) if d.publicationId == door_id), None)
        if door is None:
            print(f"❌ Door not found: {door_id}")
            return 1
        self.doors.set_favorite(door, is_favorite, credentials)
        print(f"{'★' if is_favorite else '☆'} {door.name}")
        return 0

    def logout(self):
        self.enrollment.logout()
        print("👋 Credentials and device keys removed")
        return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="Accessy device client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--data-dir", default=str(ACCESSY_PATHS.BASE), help="Directory for keys and credentials")
    parser.add_argument("--api-base-url", default=ACCESSY_CONSTANTS.API_BASE_URL, help="Accessy API root")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug logs to the console")

    subparsers = parser.add_subparsers(dest="command", required=True)

    enroll = subparsers.add_parser("enroll", help="Enroll this device")
    enroll.add_argument("--phone", required=True, help="Phone number receiving the SMS code")
    enroll.add_argument("--device-name", default=ACCESSY_CONSTANTS.DEFAULT_DEVICE_NAME)
    enroll.add_argument("--code", help="SMS verification code (prompted if omitted)")
    enroll.add_argument("--recovery-key", help="Recovery key (prompted if required)")

    subparsers.add_parser("login", help="Refresh the auth token")
    subparsers.add_parser("doors", help="List doors")

    unlock = subparsers.add_parser("unlock", help="Unlock a door by publication id")
    unlock.add_argument("door_id")

    nearest = subparsers.add_parser("nearest", help="Unlock the nearest door")
    nearest.add_argument("latitude", type=float)
    nearest.add_argument("longitude", type=float)

    favorite = subparsers.add_parser("favorite", help="Mark or unmark a favorite door")
    favorite.add_argument("door_id")
    favorite.add_argument("--off", action="store_true", help="Remove from favorites")

    subparsers.add_parser("logout", help="Forget credentials and keys")

    return parser


def main(argv=None, transport=None):
    args = build_parser().parse_args(argv)
    AccessyLogger.configure(
        level="DEBUG" if args.verbose else "INFO",
        log_dir=Path(args.data_dir) / ACCESSY_PATHS.LOGS.name,
        console_output=args.verbose,
    )
    if transport is None:
        transport = AccessyApiClient(base_url=args.api_base_url)

    cli = AccessyCli(args.data_dir, transport)

    try:
        if args.command == "enroll":
            return cli.enroll(args.phone, args.device_name, code=args.code, recovery_key=args.recovery_key)
        if args.command == "login":
            return cli.login()
        if args.command == "doors":
            return cli.list_doors()
        if args.command == "unlock":
            return cli.unlock(args.door_id)
        if args.command == "nearest":
            return cli.unlock_nearest(args.latitude, args.longitude)
        if args.command == "favorite":
            return cli.favorite(args.door_id, not args.off)
        return cli.logout()
    except CredentialsNotFoundError:
        print("❌ This device is not enrolled. Run: accessy_cli.py enroll --phone <number>")
        return 1
    except (ApiError, DoorsServiceError, EnrollmentError, KeyStoreError, AccessyCryptoError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
