import sys
from time import time

from numpy import integer


class GridProgressPrinter:
    """
    Writes single-line status messages to ``stdout`` while the blocks of a
    parameter grid are being evaluated.
    """

    def __init__(self, display: bool = True, leading_msg: str = None):
        self.lead = "" if leading_msg is None else leading_msg

        if not display:
            self.blocks_initial = self.__no_status
            self.blocks_progress = self.__no_status
            self.blocks_final = self.__no_status

    def blocks_initial(self, total_blocks: int):
        sys.stdout.write("\n")
        sys.stdout.write(f"\r  {self.lead}   [ 0 / {total_blocks} blocks evaluated ]")
        sys.stdout.flush()

    def blocks_progress(self, t_start: float, current_block: int, total_blocks: int):
        dt = time() - t_start
        eta = int(dt * (total_blocks / (current_block + 1) - 1))
        sys.stdout.write(
            f"\r  {self.lead}   [ {current_block + 1} / {total_blocks} blocks evaluated  |  ETA: {eta} sec ]"
        )
        sys.stdout.flush()

    def blocks_final(self, t_start: float, total_cells: int):
        t_elapsed = int(time() - t_start)
        mins, secs = divmod(t_elapsed, 60)
        hrs, mins = divmod(mins, 60)
        sys.stdout.write(
            f"\r  {self.lead}   [ complete - {total_cells} grid cells evaluated in {hrs}:{mins:02d}:{secs:02d} ]      "
        )
        sys.stdout.flush()
        sys.stdout.write("\n")

    @staticmethod
    def __no_status(*args):
        pass


def is_count(value) -> bool:
    """
    Checks that ``value`` is an integer, allowing ``numpy`` integer types but
    excluding ``bool``.
    """
    return isinstance(value, (int, integer)) and not isinstance(value, bool)
