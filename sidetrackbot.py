import argparse
import json
import logging
import sys
from pathlib import Path

import openai
from atproto_client.models.utils import get_model_as_dict

import utils.others as otherutils
from core.locator import InvalidAddress, PostLocator
from core.reply import SideTracker
from core.sidetrack import SideTrackLocator
from core.thread import flatten
from definitions import CONFIG_FILE
from socials.bluesky_client import BlueskyClient, BlueskyConfig
from utils.config import ConfigError, load_config, resolve_settings

logger = logging.getLogger("sidetrackbot")


def check(thread_uri, bluesky, locator):
    """
    Run one side-track check on the thread ending at `thread_uri`.

    Args:
        thread_uri (str): Canonical at:// URI of the entrance post.
        bluesky (BlueskyClient): Logged-in client used to fetch the thread.
        locator (SideTrackLocator): Picks the side-tracking post.

    Returns:
        AppBskyFeedPost.Record: The reply to post under the entrance post.
    """
    thread = flatten(bluesky.get_post_thread(thread_uri))
    result = SideTracker(locator.locate(thread.posts), thread.root, thread.entrance)
    logger.debug("Side tracking result: %r", result)
    return result.build_reply()


def parse_args(argv=None):
    # fmt: off
    parser = argparse.ArgumentParser(description="Find the reply that side-tracked a Bluesky thread and call it out.")
    parser.add_argument("--config", type=str, default=None, help=f"Path to the configuration file (default: {CONFIG_FILE}, if present).")
    parser.add_argument("-n", "--dry-run", dest="dry_run", action="store_true", help="Print the reply instead of posting it.")
    parser.add_argument("--console", action="store_true", help="Write logs to console instead of a file.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Disable all logs but critical ones.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    check_parser = subparsers.add_parser("check", help="Check a thread and exit.")
    check_parser.add_argument("thread", help="at:// URI or bsky.app URL of the post to start from.")
    # fmt: on
    return parser.parse_args(argv)


def _load_settings(args):
    if args.config:
        config = load_config(args.config)
    elif Path(CONFIG_FILE).exists():
        config = load_config(CONFIG_FILE)
    else:
        config = {}
    return resolve_settings(config)


def main(argv=None):
    """
    Entry point for the side-tracker bot.

    Parses arguments, loads settings and logging, runs the requested check and either
    prints the reply (dry run) or posts it.
    """
    args = parse_args(argv)

    try:
        settings = _load_settings(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    otherutils.setup_logging(settings, console=args.console, debug=args.debug, quiet=args.quiet)
    otherutils.log_startup_info(args, settings)
    dry_run = args.dry_run or settings.dry_run

    try:
        thread_uri = PostLocator.parse(args.thread).at_uri()
    except InvalidAddress as e:
        logger.error("Invalid thread address: %s", e)
        return 2

    try:
        bluesky = BlueskyClient(
            BlueskyConfig(
                handle=settings.bluesky_handle,
                app_password=settings.bluesky_password,
                service_url=settings.bluesky_service_url,
                session_file=settings.session_file,
            )
        )
        bluesky.login_or_restore()

        locator = SideTrackLocator(
            openai.OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url),
            model=settings.openai_model,
        )

        reply = check(thread_uri, bluesky, locator)

        if dry_run:
            logger.info("Dry run: not posting.")
            print(json.dumps(get_model_as_dict(reply), indent=2, ensure_ascii=False))
        else:
            logger.debug("Posting reply: %r", reply)
            created = bluesky.create_reply(reply)
            logger.info("Reply posted: %s", created.uri)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except Exception as e:
        logger.error(f"Error occurred: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
