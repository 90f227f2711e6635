import argparse
import logging
import sys
from typing import List, Optional

from . import info, version
from .config import VncDesConfig
from .errors import VncDesError
from .password import PasswordProcessor, from_hex_string, to_hex_string

log = logging.getLogger(__name__)

RULE = '-' * 40

#
# Building the processor from command line options
#

def create_processor(args: argparse.Namespace) -> PasswordProcessor:
    if args.key:
        if args.verbose:
            print(f"Using custom key: {args.key}")
        return PasswordProcessor.with_hex_key(args.key)

    if args.key_file:
        if args.verbose:
            print(f"Loading configuration from: {args.key_file}")
        return PasswordProcessor(VncDesConfig.from_file(args.key_file))

    if args.verbose:
        print(f"Using default VNC key: {VncDesConfig().key_as_hex()}")
    return PasswordProcessor()


def print_config(config: VncDesConfig, indent: str = '   ') -> None:
    print(f"{indent}Key: {config.key_as_hex()}")
    print(f"{indent}Strict mode: {config.strict_mode}")
    print(f"{indent}Auto truncate: {config.auto_truncate}")
    print(f"{indent}Max password length: {config.max_password_length}")

#
# Subcommands
#

def handle_encrypt(args: argparse.Namespace) -> int:
    processor = create_processor(args)
    config = processor.config
    encrypted = processor.encrypt_password(args.password)
    hex_string = to_hex_string(encrypted)

    if args.quiet:
        print(hex_string)
        return 0

    print("VNC DES password encryption")
    print(RULE)
    if args.verbose:
        print(f"Key: {config.key_as_hex()}")
    print(f"Password: {args.password!r}")
    expected = processor.process_password(args.password)
    if expected != args.password:
        print(f"Warning: password is longer than {config.max_password_length} "
              f"characters, truncated to {expected!r}")
    if args.verbose:
        print(f"Encrypted bytes: {list(encrypted)}")
    print(f"Hex: {hex_string}")
    print("Encryption complete")

    # Decrypt again to show the round trip holds
    if args.verbose:
        try:
            decrypted = processor.decrypt_password(encrypted)
        except VncDesError as exc:
            print(f"Round trip check failed: {exc}")
        else:
            if decrypted == expected:
                print("Round trip check: decrypted password matches")
            else:
                print("Round trip check: decrypted password differs")
    return 0


def handle_decrypt(args: argparse.Namespace) -> int:
    processor = create_processor(args)
    # display only
    clean_hex = ''.join(args.hex_password.split()).lower()

    if not args.quiet:
        print("VNC DES password decryption")
        print(RULE)
        if args.verbose:
            print(f"Key: {processor.config.key_as_hex()}")
        print(f"Hex input: {args.hex_password}")
        if clean_hex != args.hex_password:
            print(f"Cleaned input: {clean_hex}")

    encrypted = from_hex_string(args.hex_password)
    decrypted = processor.decrypt_password(encrypted)

    if args.quiet:
        print(decrypted)
        return 0

    if args.verbose:
        print(f"Encrypted bytes: {list(encrypted)}")
    print(f"Password: {decrypted!r}")
    print("Decryption complete")
    return 0


def handle_verify(args: argparse.Namespace) -> int:
    processor = create_processor(args)

    if not args.quiet:
        print("VNC DES password verification")
        print(RULE)
        if args.verbose:
            print(f"Key: {processor.config.key_as_hex()}")
        print(f"Password: {args.password!r}")
        print(f"Encrypted: {args.hex_password}")

    encrypted = from_hex_string(args.hex_password)
    is_match = processor.verify_password(args.password, encrypted)

    if args.quiet:
        print(is_match)
        return 0 if is_match else 1

    if is_match:
        print("Result: password matches")
        return 0

    print("Result: password does not match")
    if args.verbose:
        print(f"Actual:   {to_hex_string(processor.encrypt_password(args.password))}")
        print(f"Expected: {to_hex_string(encrypted)}")
    return 1


def demo_encryption(processor: PasswordProcessor, password: str) -> None:
    print("Encrypting...")
    print(f"   Password: {password!r}")
    encrypted = processor.encrypt_password(password)
    print(f"   Encrypted bytes: {list(encrypted)}")
    print(f"   Hex: {to_hex_string(encrypted)}")
    print()

    print("Decrypting...")
    print(f"   Password: {processor.decrypt_password(encrypted)!r}")
    print()

    is_valid = processor.verify_password(password, encrypted)
    print(f"Verification: {'match' if is_valid else 'no match'}")


def handle_demo(args: argparse.Namespace) -> int:
    processor = create_processor(args)

    print("VNC DES demo")
    print(RULE)
    print(f"Library: {info()}")
    print()
    print("Configuration:")
    print_config(processor.config)
    print()

    demo_encryption(processor, args.password)
    print(RULE)

    print()
    print("More examples:")
    print("   # Encrypt with a custom key")
    print("   vnc_des_tool --key 0123456789abcdef encrypt test")
    print()
    print("   # Verify a password against its stored hex form")
    print("   vnc_des_tool verify <PASSWORD> <HEX_PASSWORD>")
    print()
    print("   # Read settings from a configuration file")
    print("   vnc_des_tool --key-file config.json encrypt password")
    return 0


def handle_config(args: argparse.Namespace) -> int:
    if args.show:
        config = create_processor(args).config
        print("Current configuration")
        print(RULE)
        print_config(config, indent='')
        print()
        print("As JSON:")
        print(config.to_json())
        return 0

    if args.generate:
        config = VncDesConfig()
        config.save_to_file(args.generate)
        print(f"Configuration written to: {args.generate}")
        print(config.to_json())
        return 0

    if args.validate:
        try:
            config = VncDesConfig.from_file(args.validate)
        except VncDesError as exc:
            print(f"Configuration is invalid: {exc}")
            return 1
        print(f"Configuration is valid: {args.validate}")
        print_config(config)
        return 0

    print("Use one of:")
    print("  --show           show the current configuration")
    print("  --generate FILE  write a default configuration file")
    print("  --validate FILE  check a configuration file")
    return 0

#
# Argument parsing
#

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vnc_des_tool',
        description='Encrypt, decrypt and verify VNC passwords.',
        epilog=info())
    parser.add_argument('--version', action='version', version=f"%(prog)s {version()}")
    parser.add_argument('--key', metavar='HEX_KEY',
                        help='custom 16 character hex key')
    parser.add_argument('--key-file', metavar='FILE',
                        help='read the key and password policy from a JSON file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='show extra detail')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    p = subparsers.add_parser('encrypt', help='encrypt a password to hex')
    p.add_argument('password', metavar='PASSWORD')
    p.add_argument('-q', '--quiet', action='store_true', help='print only the result')
    p.set_defaults(func=handle_encrypt)

    p = subparsers.add_parser('decrypt', help='decrypt a hex password')
    p.add_argument('hex_password', metavar='HEX_PASSWORD')
    p.add_argument('-q', '--quiet', action='store_true', help='print only the result')
    p.set_defaults(func=handle_decrypt)

    p = subparsers.add_parser('verify', help='check a password against a hex password')
    p.add_argument('password', metavar='PASSWORD')
    p.add_argument('hex_password', metavar='HEX_PASSWORD')
    p.add_argument('-q', '--quiet', action='store_true', help='print only True or False')
    p.set_defaults(func=handle_verify)

    p = subparsers.add_parser('demo', help='walk through encryption and decryption')
    p.add_argument('password', metavar='PASSWORD', nargs='?', default='demo123')
    p.set_defaults(func=handle_demo)

    p = subparsers.add_parser('config', help='show, generate or validate configuration')
    group = p.add_mutually_exclusive_group()
    group.add_argument('--show', action='store_true', help='show the current configuration')
    group.add_argument('--generate', metavar='FILE', help='write a default configuration file')
    group.add_argument('--validate', metavar='FILE', help='check a configuration file')
    p.set_defaults(func=handle_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s')

    try:
        return args.func(args)
    except (VncDesError, OSError) as exc:
        log.debug("%s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

#
# Run code
#

if __name__ == "__main__":
    sys.exit(main())
