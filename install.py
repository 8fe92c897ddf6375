#!/usr/bin/env python3
"""
PokéCubed Redux Modpack Installer - console launcher.

Installs the modpack into a Minecraft directory and keeps it up to date
using the published manifest and server file timestamps.
"""

import argparse
import sys
from pathlib import Path

from modpack_installer.config import InstallerConfig
from modpack_installer.constants import LOG_FILENAME
from modpack_installer.core.log import setup_logging
from modpack_installer.core.paths import get_app_dir, get_current_package_path
from modpack_installer.exceptions import InstallerError
from modpack_installer.self_update import cleanup_leftover_updater, download_update, launch_updater
from modpack_installer.sync import InstallLabel, ModpackInstaller
from modpack_installer.ui import ConsoleProgress, confirm, print_header

# ============================================================================
# Main Application
# ============================================================================


class InstallerApp:
    """Main application controller."""

    def __init__(self, config: InstallerConfig):
        self.progress = ConsoleProgress()
        self.installer = ModpackInstaller(config, listener=self.progress)

    @property
    def target_dir(self) -> Path:
        return self.installer.target_dir

    def handle_check(self) -> int:
        found = self.installer.check_for_updates()
        return 0 if found is not None else 1

    def handle_install(self) -> int:
        outcome = self.installer.install()
        if outcome is None:
            return 1
        if outcome.purge.deleted_count:
            print(f"  Removed {outcome.purge.deleted_count} old file(s)")
        if outcome.purge.skipped:
            print(f"  {len(outcome.purge.skipped)} read-only file(s) left in place")
        return 0 if outcome.success else 1

    def handle_remove(self, assume_yes: bool = False) -> int:
        """Remove the modpack after confirmation."""
        target = self.installer.config.removal_dir
        if not assume_yes and not confirm(
            "Are you sure you want to remove the modpack?",
            f"This will delete all modpack files in {target}",
        ):
            return 0
        removed = self.installer.remove()
        return 0 if removed else 1

    def handle_self_update(self, assume_yes: bool = False) -> int:
        """Download the new installer and hand over to the updater."""
        manifest = self.installer.manifest
        if manifest is None:
            return 1
        current_package = get_current_package_path()
        try:
            updater_path, new_package = download_update(
                self.installer.downloader,
                manifest.installer.download_url,
                current_package,
                self.installer.config.updater_url,
            )
        except InstallerError as e:
            print(f"Failed to download update files: {e}")
            return 1

        if not assume_yes and not confirm("Update files downloaded successfully. Restart to complete the update?"):
            return 0
        try:
            launch_updater(updater_path, new_package, current_package, manifest.installer.version)
        except InstallerError as e:
            print(e)
            return 1
        sys.exit(0)

    def handle_change_dir(self):
        try:
            answer = input("Minecraft directory: ").strip()
        except EOFError:
            return
        if not answer:
            return
        self.installer.set_minecraft_dir(Path(answer).expanduser())
        print(f"Install path: {self.target_dir}")
        self.installer.refresh()

    def handle_change_profile(self):
        try:
            answer = input("Profile (tlauncher or vanilla): ").strip().lower()
        except EOFError:
            return
        if not answer:
            return
        self.installer.set_profile(answer)
        print(f"Install path: {self.target_dir}")
        self.installer.refresh()

    def run(self) -> int:
        """Interactive loop: load, report state, offer the next action."""
        print_header()
        print(f"Install path: {self.target_dir}")
        print()

        if self.installer.startup() is None:
            return 1

        if self.progress.installer_update and confirm("Download and install the update now?"):
            return self.handle_self_update()

        while True:
            label = self.installer.label
            if label is InstallLabel.UP_TO_DATE:
                action = "Check for Updates"
            elif label is InstallLabel.UPDATES_AVAILABLE:
                action = "Update Modpack"
            else:
                action = "Install Modpack"

            print()
            print(f"  [1] {action}")
            print("  [2] Remove Modpack")
            print("  [3] Change Minecraft Directory")
            print(f"  [4] Change Profile (current: {self.installer.config.profile})")
            print("  [q] Quit")
            try:
                choice = input("> ").strip().lower()
            except EOFError:
                choice = "q"

            if choice in ("q", "quit"):
                print("\nGoodbye!")
                return 0
            elif choice == "1":
                if label is InstallLabel.UP_TO_DATE:
                    self.handle_check()
                else:
                    self.handle_install()
            elif choice == "2":
                self.handle_remove()
                self.installer.refresh()
            elif choice == "3":
                self.handle_change_dir()
            elif choice == "4":
                self.handle_change_profile()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PokéCubed Redux Modpack Installer"
    )
    parser.add_argument(
        "--minecraft-dir",
        type=Path,
        help="Minecraft directory (default: platform .minecraft)"
    )
    parser.add_argument(
        "--profile",
        help="Launcher profile; 'tlauncher' installs into versions/PokeCubed"
    )
    parser.add_argument(
        "--local-manifest",
        type=Path,
        help="Read the manifest from a local JSON file instead of the server"
    )
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--check", action="store_true", help="Check for updates and exit")
    action.add_argument("--install", action="store_true", help="Install or update and exit")
    action.add_argument("--remove", action="store_true", help="Remove the modpack and exit")
    action.add_argument("--self-update", action="store_true", help="Download the latest installer and restart into it")
    parser.add_argument("--yes", action="store_true", help="Don't ask for confirmation")
    parser.add_argument("--console", action="store_true", help="Echo log messages to the console")
    parser.add_argument("--verbose", action="store_true", help="Log per-file staleness decisions")
    return parser


def main(argv=None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(get_app_dir() / LOG_FILENAME, console=args.console, verbose=args.verbose)
    cleanup_leftover_updater()

    config = InstallerConfig.from_env()
    if args.minecraft_dir:
        config.minecraft_dir = args.minecraft_dir.expanduser()
    if args.profile:
        config.profile = args.profile.strip().lower()
    if args.local_manifest:
        config.local_manifest = args.local_manifest

    app = InstallerApp(config)
    try:
        if args.remove:
            return app.handle_remove(assume_yes=args.yes)
        if args.check or args.install or args.self_update:
            if app.installer.load_manifest() is None:
                return 1
            if args.self_update:
                return app.handle_self_update(assume_yes=args.yes)
            return app.handle_check() if args.check else app.handle_install()
        return app.run()
    finally:
        app.installer.shutdown()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(0)
