"""
Photo Strip Booth Console
=========================

Runs the booth against a local webcam from the terminal. Either one
automatic session (``--auto``) or a menu-driven interactive loop.

Usage:
    photostrip --layout B --color "#ffd1dc"
    python -m photostrip.runner --auto --camera 1 --output-dir ./strips
"""

import argparse
import logging
import sys
import threading
from typing import Optional

from photostrip.camera import OpenCVVideoSource
from photostrip.config import COLOR_PRESETS, BoothConfig, load_config
from photostrip.errors import PhotostripError
from photostrip.fsm import SessionPhase
from photostrip.pipeline import SessionController, SessionSnapshot

logger = logging.getLogger("BoothRunner")


# Color codes for terminal output
class Colors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_header(text):
    print(f"\n{Colors.HEADER}{Colors.BOLD}{'='*60}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{text.center(60)}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{'='*60}{Colors.ENDC}\n")


def print_menu(controller: SessionController):
    print(f"\n{Colors.OKCYAN}{Colors.BOLD}Booth Menu:{Colors.ENDC}")
    print(f"  {Colors.OKBLUE}1.{Colors.ENDC} Select Layout (current: {controller.layout.id})")
    print(f"  {Colors.OKBLUE}2.{Colors.ENDC} Set Strip Colour (current: {controller.decoration_color})")
    print(f"  {Colors.OKBLUE}3.{Colors.ENDC} Start Session")
    print(f"  {Colors.OKBLUE}4.{Colors.ENDC} Take Photo")
    print(f"  {Colors.OKBLUE}5.{Colors.ENDC} Reset Session")
    print(f"  {Colors.OKBLUE}6.{Colors.ENDC} Download Strip")
    print(f"  {Colors.OKBLUE}7.{Colors.ENDC} Status")
    print(f"  {Colors.FAIL}0.{Colors.ENDC} Exit")
    print()


def format_snapshot(snapshot: SessionSnapshot) -> str:
    if snapshot.error is not None:
        state_color = Colors.FAIL
    elif snapshot.phase is SessionPhase.COMPLETE:
        state_color = Colors.OKGREEN
    elif snapshot.phase is SessionPhase.COUNTING:
        state_color = Colors.WARNING
    else:
        state_color = Colors.OKBLUE

    line = (
        f"[{state_color}{snapshot.phase.value:10}{Colors.ENDC}] "
        f"Layout {snapshot.layout_id} "
        f"Photos: {Colors.OKGREEN}{len(snapshot.photos)}/{snapshot.pose_count}{Colors.ENDC}"
    )
    if snapshot.countdown:
        line += f" | {Colors.BOLD}{snapshot.countdown}{Colors.ENDC}"
    if snapshot.error is not None:
        line += f" | {Colors.FAIL}{snapshot.error}{Colors.ENDC}"
    return line


class SessionWatcher:
    """Prints every state change and lets the caller block until a session ends."""

    def __init__(self, echo: bool = True):
        self.echo = echo
        self.finished = threading.Event()
        self.last: Optional[SessionSnapshot] = None

    def __call__(self, snapshot: SessionSnapshot):
        self.last = snapshot
        if self.echo:
            print(format_snapshot(snapshot))
        if snapshot.phase is SessionPhase.COMPLETE or snapshot.error is not None:
            self.finished.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """True when the session completed, False on abort or timeout."""
        if not self.finished.wait(timeout):
            return False
        return self.last is not None and self.last.error is None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Photo Strip Booth')
    parser.add_argument('--config', default=None, help='YAML booth config file')
    parser.add_argument('--camera', default=None,
                        help='Camera index or video path/URL (default: config camera_index)')
    parser.add_argument('--layout', default=None, help='Initial layout id (default: A)')
    parser.add_argument('--color', default=None,
                        help=f"Strip colour as #rrggbb or one of: {', '.join(COLOR_PRESETS)}")
    parser.add_argument('--output-dir', default=None, help='Directory for exported strips')
    parser.add_argument('--auto', action='store_true',
                        help='Run one session, export the strip and exit')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def resolve_color(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    for name, color in COLOR_PRESETS.items():
        if value.lower() == name.lower():
            return color
    return value


def parse_device(value):
    """Camera indexes are integers, everything else is passed to OpenCV as-is."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def build_config(args) -> BoothConfig:
    config = load_config(args.config)
    return config.with_overrides(
        default_layout=args.layout,
        default_color=resolve_color(args.color),
        output_dir=args.output_dir,
    )


def run_auto(controller: SessionController) -> int:
    watcher = SessionWatcher()
    controller.subscribe(watcher)

    poses = controller.layout.pose_count
    cycle = controller.config.countdown_seconds * controller.config.tick_interval + controller.config.cooldown
    controller.start_session()

    if not watcher.wait(timeout=poses * cycle + 10):
        logger.error("Session did not complete")
        return 1

    path = controller.export_strip()
    if path is None:
        return 1
    print(f"\n{Colors.OKGREEN}Strip saved to: {path}{Colors.ENDC}")
    return 0


def run_interactive(controller: SessionController) -> int:
    print_header("Photo Strip Booth")
    watcher = SessionWatcher(echo=False)
    controller.subscribe(watcher)

    try:
        while True:
            print_menu(controller)
            choice = input(f"{Colors.BOLD}Enter your choice: {Colors.ENDC}").strip()

            try:
                if choice == '1':
                    for preset in controller.catalog:
                        print(f"  Layout {preset.id} ({preset.pose_count} poses)")
                    layout_id = input("Layout: ").strip()
                    controller.select_layout(layout_id)
                    print(f"{Colors.OKGREEN}Layout {layout_id} selected{Colors.ENDC}")

                elif choice == '2':
                    print(f"  Presets: {', '.join(COLOR_PRESETS)}")
                    value = input("Colour: ").strip()
                    controller.set_decoration_color(resolve_color(value))

                elif choice == '3':
                    print_header("Session")
                    watcher.echo = True
                    watcher.finished.clear()
                    controller.start_session()
                    watcher.wait()
                    watcher.echo = False

                elif choice == '4':
                    photo = controller.capture_manual()
                    print(f"{Colors.OKGREEN}Captured photo #{photo.ordinal}{Colors.ENDC}")

                elif choice == '5':
                    controller.reset_session()

                elif choice == '6':
                    path = controller.export_strip()
                    if path:
                        print(f"\n{Colors.OKGREEN}Strip saved to: {path}{Colors.ENDC}")

                elif choice == '7':
                    print(format_snapshot(controller.snapshot()))

                elif choice == '0':
                    break

                else:
                    print(f"\n{Colors.FAIL}Invalid choice. Please try again.{Colors.ENDC}")

            except (PhotostripError, ValueError) as e:
                print(f"\n{Colors.FAIL}{e}{Colors.ENDC}")

    except KeyboardInterrupt:
        print(f"\n\n{Colors.WARNING}Interrupted by user{Colors.ENDC}")

    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    device = parse_device(args.camera)
    source = OpenCVVideoSource(device if device is not None else config.camera_index)
    if not source.open():
        logger.error("Camera could not be opened")
        return 1

    try:
        controller = SessionController(source, config=config)
    except (PhotostripError, OSError, ValueError) as e:
        source.release()
        logger.error(f"Failed to start booth: {e}")
        return 2

    try:
        if args.auto:
            return run_auto(controller)
        return run_interactive(controller)
    finally:
        controller.close()
        source.release()


if __name__ == '__main__':
    sys.exit(main())
