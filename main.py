#!/usr/bin/env python3
"""
Main Application Entry Point

Command-line interface for inspecting a component graph: scans packages,
lists the registered beans and optionally instantiates them to validate
the wiring.
"""

import argparse
import sys

from easyioc.config.settings import get_settings
from easyioc.context.application_context import ApplicationContext
from easyioc.core.exceptions import BeanException
from easyioc.core.logging_config import configure_from_settings, get_logger, set_container_log_level
from easyioc.core.metrics import BEAN_CREATION

logger = get_logger(__name__)

SLOWEST_BEANS = 5


def print_bean_table(context: ApplicationContext) -> None:
    """
    Print every registered bean.

    Args:
        context: Scanned context
    """
    definitions = sorted(context.get_bean_definitions(), key=lambda d: d.name)
    if not definitions:
        print("No beans registered")
        return

    name_width = max(len('NAME'), *(len(d.name) for d in definitions))
    print(f"{'NAME':<{name_width}}  {'SCOPE':<9}  TYPE")
    for definition in definitions:
        bean_type = f"{definition.bean_type.__module__}.{definition.bean_type.__qualname__}"
        print(f"{definition.name:<{name_width}}  {definition.scope:<9}  {bean_type}")


def instantiate_singletons(context: ApplicationContext) -> int:
    """
    Create every singleton so wiring errors surface now.

    Args:
        context: Scanned context

    Returns:
        Number of singletons created
    """
    created = 0
    for definition in context.get_bean_definitions():
        if definition.singleton:
            context.get_bean(definition.name)
            created += 1
    logger.info(f"Instantiated {created} singleton bean(s)")
    return created


def print_metrics(context: ApplicationContext) -> None:
    """Print the metrics summary of a context."""
    summary = context.metrics.get_summary()
    print()
    print("Metrics:")
    for name, value in sorted(summary['counters'].items()):
        print(f"  {name}: {value}")
    for name, value in sorted(summary['avg_timings'].items()):
        print(f"  {name} (avg): {value * 1000:.3f} ms")
    for name, value in sorted(summary['errors'].items()):
        print(f"  error {name}: {value}")

    slowest = sorted(
        context.metrics.timings_by_tag(BEAN_CREATION, 'bean').items(),
        key=lambda item: item[1],
        reverse=True
    )[:SLOWEST_BEANS]
    if slowest:
        print("Slowest bean creations:")
        for name, duration in slowest:
            print(f"  {name}: {duration * 1000:.3f} ms")


def main():
    """Main entry point for the application."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description='Scan packages for components and inspect the resulting bean graph'
    )

    parser.add_argument(
        '--scan',
        nargs='+',
        metavar='PKG',
        default=settings.base_packages,
        help='Packages to scan (default: IOC_BASE_PACKAGES)'
    )

    parser.add_argument(
        '--bean',
        type=str,
        help='Instantiate a single bean by name and print its type'
    )

    parser.add_argument(
        '--eager',
        action='store_true',
        help='Instantiate every singleton to validate the graph'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        help='Log level of the container loggers (default: LOG_LEVEL)'
    )

    args = parser.parse_args()

    configure_from_settings(settings)
    if args.log_level:
        set_container_log_level(args.log_level)

    if not args.scan:
        parser.error("no packages to scan: pass --scan or set IOC_BASE_PACKAGES")

    context = ApplicationContext(settings=settings)
    try:
        context.scan(*args.scan)
        print_bean_table(context)

        if args.bean:
            bean = context.get_bean(args.bean)
            print()
            print(f"{args.bean}: {type(bean).__module__}.{type(bean).__qualname__}")

        if args.eager:
            instantiate_singletons(context)

        print_metrics(context)

    except BeanException as e:
        logger.error(f"Container error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    finally:
        context.destroy()

    sys.exit(0)


if __name__ == '__main__':
    main()
