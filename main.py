#!/usr/bin/env python3
"""
Main entry point for the Twitch chat dumper
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import os
import sys

from pydantic import ValidationError

from chat_dumper.archive.recorder import check_dump_target, recover_line_file
from chat_dumper.config import ChannelRegistry, DumperConfig
from chat_dumper.errors import DumpError, InternalError, log_error
from chat_dumper.irc.client import TwitchChatClient
from chat_dumper.logging_config import LoggerConfigurator
from chat_dumper.logs.logger import logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Capture a Twitch channel's chat and archive it as a VOD comment dump"
    )
    parser.add_argument("channel", help="Channel login to join")
    parser.add_argument(
        "-o", "--output", help="Archive path; chat is only logged when omitted"
    )
    parser.add_argument("--channel-id", default="", help="Numeric channel id")
    parser.add_argument(
        "--registry",
        default=os.environ.get("CHAT_DUMPER_REGISTRY", ""),
        help="Channel registry JSON used to look up the channel id",
    )
    parser.add_argument(
        "--duration", type=float, help="Stop after this many seconds"
    )
    parser.add_argument(
        "--recover",
        action="store_true",
        help="Consolidate a leftover <output>.line file and exit",
    )
    parser.add_argument(
        "--log-file",
        default=os.environ.get("CHAT_DUMPER_LOG_FILE") or None,
        help="Also append log lines to this file",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> DumperConfig:
    config = DumperConfig(
        channel=args.channel,
        output=args.output,
        channel_id=args.channel_id,
        duration=args.duration,
        recover=args.recover,
    )
    if args.registry:
        config = config.merged_with(ChannelRegistry(args.registry).get(config.channel))
    return config


async def run_dump(config: DumperConfig) -> None:
    output = config.output if config.download_chat else None
    if config.output is not None and output is None:
        logger.log_event(
            "archive", "dump_disabled", channel=config.channel, path=str(config.output)
        )
    if output is not None:
        check_dump_target(output)

    client = TwitchChatClient(config.channel, config.channel_id)
    start_failures: list[DumpError] = []

    @client.on("connected")
    async def _on_connected() -> None:
        if output is None:
            return
        try:
            client.start_dump(output)
        except DumpError as e:
            # Observer errors are only logged; keep it for the caller.
            start_failures.append(e)
            await client.close()

    @client.on("live")
    def _on_live(message) -> None:  # type: ignore[no-untyped-def]
        logger.log_event("live", "announce", channel=client.channel)

    @client.on("sub")
    def _on_sub(display_name, months, plan, text, message) -> None:  # type: ignore[no-untyped-def]
        logger.log_event(
            "chat",
            "sub",
            channel=client.channel,
            display_name=display_name,
            months=months,
            plan=plan,
        )

    await client.connect()
    listener = asyncio.create_task(client.listen())
    try:
        if config.duration is not None:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(asyncio.shield(listener), timeout=config.duration)
        else:
            await listener
    finally:
        await client.close()
        if not listener.done():
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
    if start_failures:
        raise start_failures[0]


async def main(argv: list[str] | None = None) -> int:
    """Main function"""
    args = parse_args(argv)
    LoggerConfigurator({"log_file": args.log_file}).configure()
    try:
        config = build_config(args)
    except ValidationError as e:
        logger.log_event("app", "invalid_arguments", error_count=e.error_count())
        return 2

    try:
        if config.recover:
            recover_line_file(config.output, config.channel, config.channel_id)
            return 0
        logger.log_event("app", "start", channel=config.channel)
        await run_dump(config)
        return 0
    except (InternalError, OSError) as e:
        log_error("Chat dumper error", e)
        return 1
    finally:
        logger.log_event("app", "shutdown")


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
        sys.exit(0)


if __name__ == "__main__":
    run()
