"""
passwdsync CLI

Apply a single account change to the local host.

Usage:
    passwdsync lookup-user alice
    passwdsync add-user alice --uid 2001 --group users --groups wheel,audio
    passwdsync set-pubkeys alice keys.pub
    passwdsync --dry-run remove-group staff
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from typing import List, Optional

from passwdsync import __codename__, __version__
from passwdsync.config import (
    DEFAULT_CONFIG_PATH,
    SyncerConfig,
    get_config,
    load_config,
    set_config,
)
from passwdsync.errors import ExitCode, PasswdSyncError
from passwdsync.models import Group, User
from passwdsync.platform import fs
from passwdsync.platform.proc import RecordingRunner
from passwdsync.syncers import Syncer, create_syncer


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the passwdsync CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"passwdsync {__version__} ({__codename__})")
        return ExitCode.SUCCESS

    if not args.command:
        parser.print_help()
        return ExitCode.SUCCESS

    setup_logging(args.verbose)

    try:
        config = _load_config(args.config)
        if args.dry_run:
            config = dataclasses.replace(config, dry_run=True)
        set_config(config)
        return asyncio.run(dispatch(args, config))
    except PasswdSyncError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return e.exit_code
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.GENERIC_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return ExitCode.KEYBOARD_INTERRUPT


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='passwdsync',
        description='Converge local users, groups and SSH keys with a directory of record',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  passwdsync lookup-user alice
  passwdsync add-user alice --uid 2001 --group users --shell /bin/sh --groups wheel
  passwdsync set-groups alice wheel,audio
  passwdsync set-pubkeys alice - < alice.pub
  passwdsync --dry-run remove-user alice
        """
    )

    parser.add_argument(
        '--version', '-V',
        action='store_true',
        help='Show version and exit'
    )
    parser.add_argument(
        '-c', '--config',
        default=None,
        help=f'Configuration file (default: {DEFAULT_CONFIG_PATH} if present)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the account commands instead of running them'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v, -vv)'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    p = subparsers.add_parser('lookup-user', help='Show a local user as JSON')
    p.add_argument('name')

    p = subparsers.add_parser('lookup-group', help='Show a local group as JSON')
    p.add_argument('name')

    p = subparsers.add_parser('add-user', help='Create a user')
    p.add_argument('name')
    p.add_argument('--uid', type=int, required=True, help='Numeric user ID')
    p.add_argument('--group', required=True, help='Primary group name')
    p.add_argument('--display-name', default='', help='Display name (GECOS)')
    p.add_argument('--shell', default='/bin/sh', help='Login shell (default: /bin/sh)')
    p.add_argument('--groups', default='', help='Comma-separated supplemental groups')

    p = subparsers.add_parser('remove-user', help='Remove a user and its home directory')
    p.add_argument('name')

    p = subparsers.add_parser('set-display-name', help="Change a user's display name")
    p.add_argument('name')
    p.add_argument('value')

    p = subparsers.add_parser('set-primary-group', help="Change a user's primary group")
    p.add_argument('name')
    p.add_argument('value')

    p = subparsers.add_parser('set-shell', help="Change a user's login shell")
    p.add_argument('name')
    p.add_argument('value')

    p = subparsers.add_parser('set-groups', help="Replace a user's supplemental groups")
    p.add_argument('name')
    p.add_argument('groups', nargs='?', default='',
                   help='Comma-separated groups; omit to clear')

    p = subparsers.add_parser('set-pubkeys', help="Replace a user's SSH public keys")
    p.add_argument('name')
    p.add_argument('keyfile', nargs='?', default='-',
                   help='File with one key per line (default: stdin)')

    p = subparsers.add_parser('lock-password', help='Disable password login')
    p.add_argument('name')

    p = subparsers.add_parser('add-group', help='Create a group')
    p.add_argument('name')
    p.add_argument('--gid', type=int, required=True, help='Numeric group ID')

    p = subparsers.add_parser('remove-group', help='Remove a group')
    p.add_argument('name')

    return parser


def setup_logging(verbosity: int) -> None:
    """Configure logging to stderr; -v shows commands, -vv their output."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _load_config(path: Optional[str]) -> SyncerConfig:
    if path:
        return load_config(path)
    if os.path.exists(DEFAULT_CONFIG_PATH):
        return load_config(DEFAULT_CONFIG_PATH)
    return get_config()


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def _read_keys(keyfile: str) -> List[str]:
    if keyfile == '-':
        lines = sys.stdin.read().splitlines()
    else:
        lines = fs.read_file(keyfile).splitlines()
    return [line.strip() for line in lines if line.strip()]


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2))


async def dispatch(args: argparse.Namespace, config: SyncerConfig) -> int:
    """Run the selected subcommand against a syncer."""
    recorder = RecordingRunner() if config.dry_run else None
    syncer = create_syncer(run=recorder, config=config)

    rc = await execute(syncer, args, config)

    if recorder is not None:
        for cmd in recorder.commands:
            print(cmd)
    return rc


async def execute(syncer: Syncer, args: argparse.Namespace, config: SyncerConfig) -> int:
    command = args.command

    if command == 'lookup-user':
        user = await syncer.lookup_user(args.name)
        _print_json(user.to_dict() if user else None)
    elif command == 'lookup-group':
        group = await syncer.lookup_group(args.name)
        _print_json(group.to_dict() if group else None)
    elif command == 'add-user':
        await syncer.add_user(User(
            name=args.name,
            uid=args.uid,
            display_name=args.display_name,
            group=args.group,
            shell=args.shell,
            groups=_split_list(args.groups),
        ))
    elif command == 'remove-user':
        await syncer.remove_user(args.name)
    elif command == 'set-display-name':
        await syncer.set_display_name(args.name, args.value)
    elif command == 'set-primary-group':
        await syncer.set_primary_group(args.name, args.value)
    elif command == 'set-shell':
        await syncer.set_shell(args.name, args.value)
    elif command == 'set-groups':
        await syncer.set_supplemental_groups(args.name, _split_list(args.groups))
    elif command == 'set-pubkeys':
        keys = _read_keys(args.keyfile)
        if config.dry_run:
            print(f"would write {len(keys)} key(s) to ~{args.name}/{config.pubkey_file}")
        else:
            await syncer.set_pubkeys(args.name, keys)
    elif command == 'lock-password':
        await syncer.lock_password(args.name)
    elif command == 'add-group':
        await syncer.add_group(Group(name=args.name, gid=args.gid))
    elif command == 'remove-group':
        await syncer.remove_group(args.name)
    else:
        raise PasswdSyncError(f"Unknown command: {command}")

    return ExitCode.SUCCESS


if __name__ == '__main__':
    sys.exit(main())
