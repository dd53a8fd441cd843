import argparse
import logging
import os
import sys

from cryptography.hazmat.primitives import serialization

from rsacert_crypto import (
    DEFAULT_KEY_SIZE,
    KeySlot,
    RSACertificate,
    RSACertificateError,
    decrypt_file,
    encrypt_file,
)

log = logging.getLogger('rsacert')

# Default RSA public key file path
RSA_default_public_key_path = '~/.rsacert/public.der'
RSA_default_public_key = os.path.expanduser(RSA_default_public_key_path)


def generate_keys(output_prefix, key_size=DEFAULT_KEY_SIZE, pem=False):
    """Generate a keypair and save to '<prefix>_public.der' & '<prefix>_private.der'.

    Returns (public_path, private_path). Raises FileExistsError if either exists.
    """
    suffix = 'pem' if pem else 'der'
    encoding = serialization.Encoding.PEM if pem else serialization.Encoding.DER
    public_key_file = f"{output_prefix}_public.{suffix}"
    private_key_file = f"{output_prefix}_private.{suffix}"

    if os.path.exists(private_key_file) or os.path.exists(public_key_file):
        raise FileExistsError(
            f"File '{private_key_file}' or '{public_key_file}' already exists."
        )

    cert = RSACertificate(key_size)
    cert.save_key(public_key_file, KeySlot.PUBLIC, encoding)
    cert.save_key(private_key_file, KeySlot.PRIVATE, encoding)
    return public_key_file, private_key_file


def build_parser():
    parser = argparse.ArgumentParser(description="Chunked RSA Encryption/Decryption Tool")

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument('-e', '--encrypt', action='store_true', help='Encrypt file with an RSA public key')
    action_group.add_argument('-d', '--decrypt', action='store_true', help='Decrypt file with an RSA private key')
    action_group.add_argument('--genkey', action='store_true', help='Generate RSA key pair')

    parser.add_argument('file', nargs='?', help='File to encrypt or decrypt')
    parser.add_argument('-i', '--keyfile', help=f'RSA key file (public key for encryption, private key for decryption), Default:{RSA_default_public_key_path}')
    parser.add_argument('-o', '--output', help='Output file, or key file prefix with --genkey')
    parser.add_argument('--key-size', type=int, default=DEFAULT_KEY_SIZE, help=f'Key size in bits for --genkey (default {DEFAULT_KEY_SIZE})')
    parser.add_argument('--pem', action='store_true', help='Write generated keys as PEM instead of DER')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    # Parameter validation
    if args.genkey and not args.output:
        parser.error("--genkey requires -o to specify the output file prefix.")

    if args.encrypt or args.decrypt:
        if not args.file:
            parser.error("-e or -d requires a file to encrypt or decrypt.")
        if not args.keyfile:
            if args.encrypt and os.path.exists(RSA_default_public_key):
                args.keyfile = RSA_default_public_key
            else:
                parser.error("-e or -d requires -i (key file).")

    try:
        if args.genkey:
            pub, priv = generate_keys(args.output, args.key_size, args.pem)
            log.info("RSA keys saved to '%s' and '%s'", pub, priv)
        elif args.encrypt:
            out = encrypt_file(args.file, args.output, public_key_path=args.keyfile)
            log.info("File '%s' successfully encrypted to '%s'", args.file, out)
        elif args.decrypt:
            out = decrypt_file(args.file, args.output, private_key_path=args.keyfile)
            log.info("File '%s' successfully decrypted to '%s'", args.file, out)
        else:
            parser.print_help()
    except (RSACertificateError, OSError) as e:
        log.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
