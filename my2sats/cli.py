"""
my2sats CLI: publish to a my2sats site using Nostr authentication.

Usage:
    my2sats store-key [nsec]        # Encrypt and store your Nostr secret key
    my2sats post <file>             # Create a post from a markdown file
    my2sats update <slug> [opts]    # Update an existing post
    my2sats delete <slug>           # Delete a post
    my2sats init-config             # Write a default config file
    my2sats version                 # Show version
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx

from my2sats.api.client import My2SatsClient
from my2sats.config import Config, create_default_config, load_config, resolve_config_path
from my2sats.errors import FileNotFound, My2SatsError, OperationAborted, format_error
from my2sats.keys import Signer, decode_secret_key, open_keyfile, seal, write_keyfile
from my2sats.keys.vault import DEFAULT_LOG_N, MAX_LOG_N
from my2sats.prompt import Prompt, TerminalPrompt
from my2sats.publish import (
    UpdateOverrides,
    build_post_payload,
    build_update_draft,
    finalize_post_payload,
    finalize_update_payload,
    get_base_path,
    parse_frontmatter,
    process_images,
)


def _log_n(value: str) -> int:
    try:
        log_n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if not 1 <= log_n <= MAX_LOG_N:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_LOG_N}")
    return log_n


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="my2sats",
        description="CLI tool for posting to my2sats using Nostr authentication.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--config", type=str, help="Config file (default: ~/.my2sats/config.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("-k", "--keyfile", type=str, help="Path to the encrypted key file")
        p.add_argument("-a", "--api", type=str, help="API base URL")

    # store-key
    store_parser = subparsers.add_parser("store-key", help="Store and encrypt your Nostr secret key")
    store_parser.add_argument(
        "secret", nargs="?", help="Your nsec or hex secret key (will prompt if not provided)"
    )
    store_parser.add_argument("-k", "--keyfile", type=str, help="Path to store the encrypted key")
    store_parser.add_argument("--force", action="store_true", help="Overwrite an existing keyfile")
    store_parser.add_argument(
        "--log-n", type=_log_n, default=DEFAULT_LOG_N, help="scrypt cost exponent (default: 16)"
    )

    # post
    post_parser = subparsers.add_parser("post", help="Create a new post from a markdown file")
    post_parser.add_argument("file", help="Path to markdown file with frontmatter")
    add_common(post_parser)

    # update
    update_parser = subparsers.add_parser("update", help="Update an existing post")
    update_parser.add_argument("slug", help="Slug of the post to update")
    add_common(update_parser)
    update_parser.add_argument("-f", "--file", type=str, help="Markdown file with updated content")
    update_parser.add_argument("-t", "--title", type=str, help="New title")
    update_parser.add_argument("-c", "--content", type=str, help="New content (markdown)")
    update_parser.add_argument("-e", "--excerpt", type=str, help="New excerpt")
    update_parser.add_argument(
        "-i", "--featured-image", type=str, help="New featured image (local path or URL)"
    )
    update_parser.add_argument("--author", type=str, help="New author")
    update_parser.add_argument("--tags", type=str, help="New tags (comma-separated)")
    update_parser.add_argument("-s", "--new-slug", type=str, help="New slug (rename the post)")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete an existing post")
    delete_parser.add_argument("slug", help="Slug of the post to delete")
    add_common(delete_parser)
    delete_parser.add_argument("-f", "--force", action="store_true", help="Skip confirmation prompt")

    # init-config
    init_parser = subparsers.add_parser("init-config", help="Write a config file with defaults")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    # version
    subparsers.add_parser("version", help="Show version")

    return parser


def main(
    argv: list[str] | None = None,
    *,
    prompt: Prompt | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if args.version or args.command == "version":
        from my2sats import __version__

        print(f"my2sats {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    prompt = prompt or TerminalPrompt()
    try:
        if args.command == "init-config":
            return _cmd_init_config(args)

        cfg = load_config(args.config)
        if args.command == "store-key":
            return _cmd_store_key(args, cfg, prompt)
        elif args.command == "post":
            return asyncio.run(_cmd_post(args, cfg, prompt, transport))
        elif args.command == "update":
            return asyncio.run(_cmd_update(args, cfg, prompt, transport))
        elif args.command == "delete":
            return _cmd_delete(args, cfg, prompt, transport)
        else:
            parser.print_help()
            return 0
    except OperationAborted as e:
        print(format_error(e), file=sys.stderr)
        return 1
    except My2SatsError as e:
        print(f"Error: {format_error(e)}", file=sys.stderr)
        return 1


def _keyfile(args: argparse.Namespace, cfg: Config) -> Path:
    return Path(args.keyfile).expanduser() if args.keyfile else cfg.keyfile_path


def _print_result(message: str, result: Any) -> None:
    print(message)
    print(json.dumps(result, indent=2))


async def _unlock(keyfile: Path, prompt: Prompt) -> Signer:
    signer = Signer(await open_keyfile(keyfile, prompt))
    print(f"Using pubkey: {signer.public_key}")
    return signer


def _cmd_init_config(args: argparse.Namespace) -> int:
    path = create_default_config(resolve_config_path(args.config), overwrite=args.force)
    print(f"Config file written to {path}")
    return 0


def _cmd_store_key(args: argparse.Namespace, cfg: Config, prompt: Prompt) -> int:
    keyfile = _keyfile(args, cfg)

    secret_input = args.secret or prompt.ask("Enter your nsec or hex secret key:")
    if not secret_input:
        raise OperationAborted()
    secret_key = decode_secret_key(secret_input)
    signer = Signer(secret_key)
    print(f"Public key: {signer.public_key}")
    print(f"            {signer.npub}")

    if keyfile.exists() and not args.force:
        if not prompt.confirm(f"A keyfile already exists at {keyfile}. Overwrite it?"):
            raise OperationAborted()

    password = prompt.ask("Enter encryption password:")
    if not password:
        raise OperationAborted()
    confirm = prompt.ask("Confirm password:")
    if not confirm:
        raise OperationAborted()
    if password != confirm:
        raise My2SatsError("Passwords do not match")

    print("Encrypting key (this may take a moment)...")
    write_keyfile(keyfile, seal(secret_key, password, log_n=args.log_n))
    print(f"Key stored successfully in {keyfile}")
    return 0


async def _cmd_post(
    args: argparse.Namespace,
    cfg: Config,
    prompt: Prompt,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    path = Path(args.file)
    if not path.is_file():
        raise FileNotFound(args.file)

    frontmatter, content = parse_frontmatter(path.read_text(encoding="utf-8"))
    payload = build_post_payload(frontmatter, content)

    signer = await _unlock(_keyfile(args, cfg), prompt)
    async with My2SatsClient(args.api or cfg.api_url, signer.sign_event, transport=transport) as client:
        processed = await process_images(
            content, frontmatter.featured_image, get_base_path(path), client, cfg
        )
        result = await client.create_post(finalize_post_payload(payload, processed))

    _print_result("Post created successfully:", result)
    return 0


async def _cmd_update(
    args: argparse.Namespace,
    cfg: Config,
    prompt: Prompt,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    frontmatter = None
    file_content = None
    base_path = "."
    if args.file:
        path = Path(args.file)
        if not path.is_file():
            raise FileNotFound(args.file)
        frontmatter, file_content = parse_frontmatter(path.read_text(encoding="utf-8"))
        base_path = get_base_path(path)

    overrides = UpdateOverrides(
        new_slug=args.new_slug,
        title=args.title,
        content=args.content,
        excerpt=args.excerpt,
        featured_image=args.featured_image,
        author=args.author,
        tags=args.tags,
    )
    draft = build_update_draft(overrides, frontmatter, file_content)

    signer = await _unlock(_keyfile(args, cfg), prompt)
    async with My2SatsClient(args.api or cfg.api_url, signer.sign_event, transport=transport) as client:
        processed = None
        if draft.has_images_to_process:
            processed = await process_images(
                draft.content or "", draft.featured_image, base_path, client, cfg
            )
        result = await client.update_post(args.slug, finalize_update_payload(draft, processed))

    _print_result("Post updated successfully:", result)
    return 0


def _cmd_delete(
    args: argparse.Namespace,
    cfg: Config,
    prompt: Prompt,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    if not args.force and not prompt.confirm(f'Are you sure you want to delete the post "{args.slug}"?'):
        print("Deletion cancelled.")
        return 0
    return asyncio.run(_delete(args, cfg, prompt, transport))


async def _delete(
    args: argparse.Namespace,
    cfg: Config,
    prompt: Prompt,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    signer = await _unlock(_keyfile(args, cfg), prompt)
    async with My2SatsClient(args.api or cfg.api_url, signer.sign_event, transport=transport) as client:
        result = await client.delete_post(args.slug)

    _print_result("Post deleted successfully:", result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
