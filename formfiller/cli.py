"""
formfiller command line runner.

Fills one Workday application page from an applicant profile and prints the
per-field report. Whatever the report lists as failed is left for the
operator to complete by hand.
"""
import argparse
import asyncio
import json
import sys
from typing import List, Optional

from loguru import logger
from playwright.async_api import async_playwright

from formfiller.components.executors import StepSequencer
from formfiller.components.models import FieldDescriptor, SequenceReport
from formfiller.components.tree import PlaywrightRenderTree
from formfiller.config import ConfigError, FillerConfig, get_config, load_config
from formfiller.logging_config import CONSOLE_FORMAT, setup_daily_log_rotation, setup_file_logging
from formfiller.pages import PAGE_BUILDERS, SECTION_ANCHORS, build_page_steps, load_profile


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formfiller",
        description="Fill a Workday application page from an applicant profile",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Attach to a Chrome started with --remote-debugging-port=9222
  formfiller my-information --profile me.json --cdp http://localhost:9222

  # Open the page in a new browser and keep it open for review
  formfiller my-experience --profile me.json --url "https://company.wd1.myworkdayjobs.com/..." --keep-open
        """
    )
    parser.add_argument("page", choices=sorted(PAGE_BUILDERS), help="Which application page to fill")
    parser.add_argument("--profile", required=True, help="Path to the applicant profile JSON")

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--url", help="Open this URL in a new browser")
    target.add_argument("--cdp", help="Attach to a running browser over CDP and use its active tab")

    parser.add_argument("--headless", action="store_true", help="Launch the browser headless (with --url)")
    parser.add_argument("--keep-open", action="store_true",
                        help="Keep a launched browser open until its page is closed")
    parser.add_argument("--submit", action="store_true", help="Click 'Save and Continue' after the last field")
    parser.add_argument("--log-file", action="store_true", help="Also write a full DEBUG log under logs/")
    parser.add_argument("--daily-log", action="store_true", help="Like --log-file, but one file rotated at midnight")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    return parser


async def fill_page(
    steps: List[FieldDescriptor],
    config: FillerConfig,
    url: Optional[str] = None,
    cdp: Optional[str] = None,
    headless: bool = False,
    keep_open: bool = False
) -> SequenceReport:
    """Open or attach to a browser, run the steps against the active page and return the report."""
    async with async_playwright() as playwright:
        if cdp:
            logger.info(f"🔌 Attaching to browser at {cdp}")
            browser = await playwright.chromium.connect_over_cdp(cdp)
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[-1] if context.pages else await context.new_page()
            owns_browser = False
        else:
            browser = await playwright.chromium.launch(headless=headless)
            page = await browser.new_page()
            owns_browser = True

        try:
            if url:
                logger.info(f"🌐 Opening {url}")
                await page.goto(url, wait_until="domcontentloaded")

            sequencer = StepSequencer(PlaywrightRenderTree(page), config, sections=SECTION_ANCHORS)
            report = await sequencer.run(steps)

            if owns_browser and keep_open and not headless:
                logger.info("Browser will remain open for review. Close the page to exit.")
                await page.wait_for_event("close", timeout=0)
            return report
        finally:
            if owns_browser:
                await browser.close()


def print_report(report: SequenceReport, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return

    print("\n" + "=" * 60)
    for result in report:
        mark = "✅" if result.succeeded else "❌"
        line = f"{mark} {result.field_name}"
        if result.succeeded:
            line += f" [{result.strategy_used.value}]"
            if result.low_confidence:
                line += " (low confidence, please check)"
        else:
            line += f" [{result.error.value}] {result.detail}"
        print(line)
    print("=" * 60)
    print(report.summary() + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.daily_log:
        setup_daily_log_rotation(log_level=config.log_level)
    elif args.log_file:
        setup_file_logging(log_level=config.log_level)
    else:
        logger.remove()
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=config.log_level)
    logger.debug(f"Configuration: {get_config(config)}")

    try:
        profile = load_profile(args.profile)
        steps = build_page_steps(args.page, profile, submit=args.submit)
    except (OSError, ValueError) as e:
        # ProfileError and json decoding errors are ValueErrors
        logger.error(f"❌ Could not load profile {args.profile}: {e}")
        return 2

    try:
        report = asyncio.run(fill_page(
            steps,
            config,
            url=args.url,
            cdp=args.cdp,
            headless=args.headless,
            keep_open=args.keep_open,
        ))
    except KeyboardInterrupt:
        logger.info("👋 Interrupted")
        return 130

    print_report(report, as_json=args.json)
    return 0 if report.all_succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
