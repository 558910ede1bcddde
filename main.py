#!/usr/bin/env python3
"""
Main entry point for FounderHub - Startup profile and pitch deck workspace

Usage:
    python main.py          # Opens the terminal UI by default
    python main.py tui      # Explicitly opens the terminal UI
    python main.py cli      # Opens CLI
    python main.py cli [args...]  # Pass arguments to CLI
"""

import sys


def main():
    """Main entry point that routes to the TUI or CLI based on arguments."""

    # Default to TUI if no arguments provided
    if len(sys.argv) == 1:
        mode = "tui"
    else:
        mode = sys.argv[1].lower()

    if mode == "tui":
        from founderhub.utils.logging import quiet_console_logging, setup_logging
        from cli.tui import run

        setup_logging(log_file=True)
        quiet_console_logging()
        try:
            run()
        except KeyboardInterrupt:
            print("\nFounderHub terminated by user.")
            sys.exit(0)

    elif mode == "cli":
        from cli.app import main as cli_main
        # Remove 'cli' from argv to pass remaining args to CLI
        sys.argv.pop(1)
        cli_main()

    elif mode in ["--help", "-h", "help"]:
        print(__doc__)
        print("\nAdditional Information:")
        print("  TUI: Stage, review and submit pitch deck files interactively")
        print("  CLI: Command-line interface for profile, team, canvas and uploads")
        print("\nRequirements:")
        print("  Python package installed with 'pip install -e .'")
        print("  Optional: poppler (PDF previews) and ffmpeg (video previews)")
        sys.exit(0)

    else:
        # Assume it's a CLI command and let the CLI handle it
        from cli.app import main as cli_main
        cli_main()


if __name__ == "__main__":
    main()
