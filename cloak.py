#!/usr/bin/env python3
"""
PixelCloak - Command Line Interface
Hide encrypted messages in images and crack MD5 hashes
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

from pixelcloak import cracker, dots, morse
from pixelcloak.core import capacity_bits
from pixelcloak.errors import Cancelled, CloakError
from pixelcloak.hashes import ALGORITHMS, digest, digest_all
from pixelcloak.image import (
    decode_lsb, decode_md5_pattern, decode_pattern, encode_lsb, encode_md5_pattern,
    encode_pattern, extract_from_image, get_image_capacity, hide_in_image,
)
from pixelcloak.schemes import auto_decode
from pixelcloak.surface import open_image, save_image
from pixelcloak.utils import TERMINATOR, format_size

IMAGE_SCHEMES = {
    'lsb': (encode_lsb, decode_lsb),
    'pattern_lsb': (encode_pattern, decode_pattern),
    'md5_pattern': (encode_md5_pattern, decode_md5_pattern),
}
SYNTHETIC_SCHEMES = {'rd': dots, 'morse': morse}


def read_password(confirm: bool = False) -> str:
    password = getpass.getpass("Enter password: ")
    if confirm and password != getpass.getpass("Confirm password: "):
        raise CloakError("Passwords do not match")
    return password


def read_key(args) -> str:
    if args.scheme in ('pattern_lsb', 'md5_pattern') or getattr(args, 'key', False):
        return getpass.getpass("Enter stego key: ")
    return None


def read_source_text(source: str) -> str:
    """Return the contents of `source` if it is a file, else the argument itself."""
    path = Path(source)
    if path.is_file():
        return path.read_text(encoding='utf-8').strip()
    return source.strip()


def cmd_hide(args):
    """Hide a message in a carrier image."""
    password = read_password(confirm=True)
    key = read_key(args)
    encoder, _ = IMAGE_SCHEMES[args.scheme]

    result_path = hide_in_image(args.carrier, args.message, password, args.output,
                                encoder=encoder, key=key)

    print("✓ Message hidden successfully!")
    print(f"  Output: {result_path}")
    if args.verbose:
        print(f"  Scheme: {args.scheme}")
        print(f"  Hidden: {len(args.message)} characters (AES-256-GCM)")
    return 0


def cmd_render(args):
    """Render a message as a Random-Dot or Morse image."""
    password = read_password(confirm=True)
    result = SYNTHETIC_SCHEMES[args.scheme].encode(args.message, password)

    output_path = save_image(result.surface, args.output)
    print("✓ Image generated successfully!")
    print(f"  Output: {output_path}")

    if args.intermediate_out:
        Path(args.intermediate_out).write_text(result.intermediate, encoding='utf-8')
        print(f"  Intermediate payload: {args.intermediate_out}")
    elif args.verbose:
        print(f"  Intermediate payload: {result.intermediate}")
    return 0


def cmd_extract(args):
    """Extract a hidden message."""
    password = read_password()
    key = read_key(args)

    if args.scheme in SYNTHETIC_SCHEMES:
        module = SYNTHETIC_SCHEMES[args.scheme]
        if args.intermediate:
            artifact = read_source_text(args.source)
        else:
            artifact = open_image(args.source)
        message = module.decode(artifact, password)
    else:
        _, decoder = IMAGE_SCHEMES[args.scheme]
        message = extract_from_image(args.source, password, decoder=decoder, key=key)

    print("✓ Message extracted successfully!")
    print(f"  Message: {message}")
    return 0


def cmd_capacity(args):
    """Show carrier capacity."""
    capacity = get_image_capacity(args.carrier)

    print(f"Carrier: {args.carrier}")
    print(f"Capacity: {format_size(capacity)}")

    if args.verbose:
        surface = open_image(args.carrier)
        print(f"  Size: {surface.width}x{surface.height}")
        print(f"  Embeddable bits: {capacity_bits(surface)}")
        print(f"  Terminator: {len(TERMINATOR)} bits")
    return 0


def cmd_hash(args):
    """Print digests of a text."""
    if args.algorithm == 'all':
        for name, value in digest_all(args.text).items():
            print(f"{name:>7}: {value}")
    else:
        print(digest(args.algorithm, args.text))
    return 0


def _print_progress(checked: int, total: int):
    percent = checked / total * 100 if total else 100.0
    print(f"\r  Checked {checked:,} / {total:,} ({percent:.1f}%)", end='', file=sys.stderr)


def cmd_crack(args):
    """Run a password search against an MD5 digest."""
    on_progress = None if args.quiet else _print_progress

    if args.attack == 'rainbow':
        cracker.crack_rainbow(args.hash)
    elif args.attack == 'dictionary':
        wordlist = Path(args.wordlist).read_text(encoding='utf-8', errors='replace')
        coro = cracker.crack_dictionary(args.hash, wordlist, args.batch_size, on_progress)
    else:
        charset = cracker.build_charset(args.lower, args.upper, args.digits,
                                        args.symbols, args.custom or '')
        coro = cracker.crack_brute_force(args.hash, charset, args.max_length, args.batch_size,
                                         on_progress, max_combinations=args.max_combinations)

    try:
        job = asyncio.run(coro)
    except KeyboardInterrupt:
        raise Cancelled("Aborted by user.") from None
    finally:
        if on_progress:
            print(file=sys.stderr)

    if job.password is None:
        print(f"✗ Password not found ({job.checked:,} candidates checked)")
        return 2
    print("✓ Password found!")
    print(f"  Password: {job.password}")
    print(f"  Checked: {job.checked:,} / {job.total:,}")
    return 0


def cmd_autodecode(args):
    """Try every decoding method on an image or text."""
    password = getpass.getpass("Enter password (leave empty to skip): ") or None
    key = getpass.getpass("Enter stego key (leave empty to skip): ") if args.key else None

    if args.text:
        report = auto_decode(text=read_source_text(args.source), password=password, key=key)
    else:
        if not password:
            raise CloakError("A password is required to decode images")
        report = auto_decode(surface=open_image(args.source), password=password, key=key)

    for entry in report.decoding_log:
        print(f"  {entry.method}: {entry.result} - {entry.details}")

    if report.final_result is None:
        print("✗ No hidden message found")
        return 2
    print(f"✓ Decoded with {report.detected_method}")
    print(f"  Message: {report.final_result}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='cloak',
        description='Hide encrypted messages in images and crack MD5 hashes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Hide a message in an image
  cloak hide "Secret message" image.png -o output.png

  # Hide along a key-derived pixel pattern
  cloak hide "Secret message" image.png -s pattern_lsb

  # Render a message as a Morse grid and keep the hex payload
  cloak render "Secret message" morse -o morse.png --intermediate-out morse.hex

  # Extract from the image, or from the intermediate payload
  cloak extract output.png
  cloak extract morse.hex -s morse --intermediate

  # Crack an MD5 hash
  cloak crack dictionary 5f4dcc3b5aa765d61d8327deb882cf99 rockyou.txt
  cloak crack bruteforce 5f4dcc3b5aa765d61d8327deb882cf99 --lower --max-length 4
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Hide command
    hide_parser = subparsers.add_parser('hide', help='Hide a message in a carrier image')
    hide_parser.add_argument('message', help='Text message to hide')
    hide_parser.add_argument('carrier', help='Carrier image')
    hide_parser.add_argument('-o', '--output', help='Output file path')
    hide_parser.add_argument('-s', '--scheme', default='lsb', choices=sorted(IMAGE_SCHEMES),
                             help='Embedding scheme (default: lsb)')
    hide_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    hide_parser.set_defaults(func=cmd_hide)

    # Render command
    render_parser = subparsers.add_parser('render', help='Render a message as a synthetic image')
    render_parser.add_argument('message', help='Text message to hide')
    render_parser.add_argument('scheme', choices=sorted(SYNTHETIC_SCHEMES), help='Image type')
    render_parser.add_argument('-o', '--output', default='cloak.png', help='Output image path')
    render_parser.add_argument('--intermediate-out',
                               help='Also write the binary (rd) or hex (morse) payload here')
    render_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    render_parser.set_defaults(func=cmd_render)

    # Extract command
    extract_parser = subparsers.add_parser('extract', help='Extract a hidden message')
    extract_parser.add_argument('source', help='Stego image, or intermediate payload with --intermediate')
    extract_parser.add_argument('-s', '--scheme', default='lsb',
                                choices=sorted(IMAGE_SCHEMES) + sorted(SYNTHETIC_SCHEMES),
                                help='Embedding scheme (default: lsb)')
    extract_parser.add_argument('--intermediate', action='store_true',
                                help='Source is a binary/hex payload (text or file), not an image')
    extract_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    extract_parser.set_defaults(func=cmd_extract)

    # Capacity command
    capacity_parser = subparsers.add_parser('capacity', help='Show carrier capacity')
    capacity_parser.add_argument('carrier', help='Carrier image to check')
    capacity_parser.add_argument('-v', '--verbose', action='store_true', help='Show details')
    capacity_parser.set_defaults(func=cmd_capacity)

    # Hash command
    hash_parser = subparsers.add_parser('hash', help='Compute digests of a text')
    hash_parser.add_argument('text', help='Input text (UTF-8)')
    hash_parser.add_argument('-a', '--algorithm', default='all',
                             choices=['all'] + [a.value for a in ALGORITHMS],
                             help='Digest algorithm (default: all)')
    hash_parser.set_defaults(func=cmd_hash)

    # Crack command
    crack_parser = subparsers.add_parser('crack', help='Crack an MD5 hash')
    crack_parser.add_argument('attack', choices=['dictionary', 'bruteforce', 'rainbow'])
    crack_parser.add_argument('hash', help='Target MD5 hash (32 hex characters)')
    crack_parser.add_argument('wordlist', nargs='?', help='Wordlist file for dictionary attacks')
    crack_parser.add_argument('--lower', action='store_true', help='Include a-z')
    crack_parser.add_argument('--upper', action='store_true', help='Include A-Z')
    crack_parser.add_argument('--digits', action='store_true', help='Include 0-9')
    crack_parser.add_argument('--symbols', action='store_true', help='Include common symbols')
    crack_parser.add_argument('--custom', help='Extra characters for the brute-force charset')
    crack_parser.add_argument('--max-length', type=int, default=4,
                              help='Maximum brute-force length (default: 4)')
    crack_parser.add_argument('--batch-size', type=int, default=cracker.BATCH_SIZE,
                              help=f'Candidates per batch (default: {cracker.BATCH_SIZE})')
    crack_parser.add_argument('--max-combinations', type=int,
                              default=cracker.BRUTE_FORCE_MAX_COMBINATIONS,
                              help='Refuse brute-force attacks larger than this')
    crack_parser.add_argument('-q', '--quiet', action='store_true', help='Hide progress')
    crack_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    crack_parser.set_defaults(func=cmd_crack)

    # Autodecode command
    auto_parser = subparsers.add_parser('autodecode', help='Try every decoding method')
    auto_parser.add_argument('source', help='Image file, or text/text file with --text')
    auto_parser.add_argument('--text', action='store_true', help='Source is text, not an image')
    auto_parser.add_argument('-k', '--key', action='store_true',
                             help='Prompt for a stego key to also try the pattern schemes')
    auto_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    auto_parser.set_defaults(func=cmd_autodecode)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'crack' and args.attack == 'dictionary' and not args.wordlist:
        parser.error("dictionary attacks need a wordlist file")

    try:
        return args.func(args)
    except CloakError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
