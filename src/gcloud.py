import csv
import io
from io import TextIOWrapper
from subprocess import Popen, PIPE
from threading import Thread
from typing import Sequence, MutableSequence, Tuple, Optional

from util import GcloudError, Logger


class GcloudInvoker:

    def __init__(self, executable: str = 'gcloud') -> None:
        super().__init__()
        self._executable: str = executable

    def _invoke(self,
                args: Sequence[str],
                stderr_logger: Logger = None,
                stdout_logger: Logger = None) -> Tuple[int, str, str]:

        cmd: MutableSequence[str] = [self._executable]
        cmd.extend(args)

        try:
            process = Popen(cmd, shell=False, stdout=PIPE, stderr=PIPE, universal_newlines=True)
        except FileNotFoundError as e:
            raise GcloudError(f"The '{self._executable}' command is not available. Please install the Google Cloud "
                              f"SDK (https://cloud.google.com/sdk/docs/install) and run this script again.") from e

        stdout_lines: MutableSequence[str] = []
        stderr_lines: MutableSequence[str] = []

        # collects a stream's lines, and optionally echoes them to a logger
        def handler(stream: TextIOWrapper, lines: MutableSequence[str], logger: Optional[Logger]):
            for line in iter(stream.readline, ''):
                line = line.rstrip('\n')
                lines.append(line)
                if logger:
                    logger.info(line)

        threads = [
            Thread(target=handler,
                   name=f"gcloud-{args[0] if args else ''}-stdout",
                   kwargs={'stream': process.stdout, 'lines': stdout_lines, 'logger': stdout_logger},
                   daemon=True),
            Thread(target=handler,
                   name=f"gcloud-{args[0] if args else ''}-stderr",
                   kwargs={'stream': process.stderr, 'lines': stderr_lines, 'logger': stderr_logger},
                   daemon=True)
        ]
        for thread in threads:
            thread.start()

        process.wait()
        for thread in threads:
            thread.join()

        return process.returncode, '\n'.join(stdout_lines), '\n'.join(stderr_lines)

    def run(self, logger: Logger, args: Sequence[str]) -> None:
        return_code, stdout, stderr = self._invoke(args=args, stderr_logger=logger, stdout_logger=logger)
        if return_code != 0:
            raise GcloudError(f"gcloud command terminated with exit code #{return_code}!")

    def run_value(self, args: Sequence[str]) -> Optional[str]:
        return_code, stdout, stderr = self._invoke(args=args)
        if return_code != 0:
            return None
        return stdout.strip()

    def run_csv(self, args: Sequence[str]) -> Optional[Sequence[Sequence[str]]]:
        return_code, stdout, stderr = self._invoke(args=args)
        if return_code != 0:
            return None
        return [row for row in csv.reader(io.StringIO(stdout.strip())) if row]
