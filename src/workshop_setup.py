#!/usr/bin/env python3

import sys
import traceback

from colors import bold, underline, blue

from cloud import CloudServices
from context import Context
from gcloud import GcloudInvoker
from onboarding import Onboarding
from util import UserError, Logger


def main():
    context: Context = Context()
    print('')
    with Logger(blue(underline(bold(f":cloud: Google Cloud Workshop - Project Setup v{context.version}")))) as logger:
        logger.info(f":rocket: {bold('Preparing your workshop project...')}")

    try:
        # load the auto files from the configuration dir and the workspace
        context.load_auto_files()
        if context.verbose:
            context.display()

        Onboarding(context=context, svc=CloudServices(GcloudInvoker(context.gcloud))).run()

    except UserError as e:
        with Logger(indent_amount=0, spacious=False) as logger:
            if context and context.verbose:
                logger.error(traceback.format_exc().strip())
            else:
                logger.error(f"ERROR: {e.message}")
        sys.exit(1)

    except KeyboardInterrupt:
        with Logger(indent_amount=0, spacious=False) as logger:
            logger.error(f"Interrupted.")
        sys.exit(1)

    except Exception:
        # always print stacktrace since this exception is an unexpected exception
        with Logger(indent_amount=0, spacious=False) as logger:
            logger.error(traceback.format_exc().strip())
        sys.exit(1)


if __name__ == "__main__":
    main()
