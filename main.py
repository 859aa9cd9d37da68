"""
Main entry point for the Transcoder.

Parses the command line, configures logging and runs one conversion job on
the worker thread. Pressing Ctrl+C while the job runs cancels it and removes
the partial output file.
"""
import json
import sys

from loguru import logger

from transcoder.cli import get_args, options_from_args
from transcoder.config.common import LOGGER_FORMAT
from transcoder.domain.exceptions import TranscoderException
from transcoder.services.transcode_service import TranscodeService
from transcoder.utils.module_updater import Modules

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130

# Configure the logger for initial setup.
# The level is overridden once the command-line arguments are parsed.
logger.remove()
logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)


def main(argv=None) -> int:
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    if args.check_ffmpeg:
        try:
            Modules.verify_ffmpeg()
        except TranscoderException as e:
            logger.error(str(e))
            return EXIT_FAILED

    with TranscodeService() as service:
        if args.info:
            try:
                info = service.get_video_info(args.input)
            except TranscoderException as e:
                logger.error(str(e))
                return EXIT_FAILED
            print(json.dumps(info.to_dict(), indent=2))
            return EXIT_OK

        try:
            options = options_from_args(args)
        except TranscoderException as e:
            logger.error(str(e))
            return EXIT_FAILED

        last_reported = [-1]

        def report_progress(event):
            step = int(event.percent // 5)
            if step > last_reported[0]:
                last_reported[0] = step
                logger.info(f"{event.percent:5.1f}% done")

        future = service.submit(args.input, options, on_progress=report_progress)
        try:
            outcome = future.result()
        except KeyboardInterrupt:
            service.cancel()
            outcome = future.result()

    print(json.dumps(outcome.to_dict()))
    if outcome.succeeded:
        return EXIT_OK
    if outcome.cancelled:
        return EXIT_CANCELLED
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
