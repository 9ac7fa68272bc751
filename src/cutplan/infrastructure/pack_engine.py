"""Setup and run of a multi-heuristic guillotine packing.

The engine explores a tree of packers. Stage 0 holds one packer per
signature, each filling a first bin from the full box list. After every
stage the packers are ranked and filtered down to a few survivors, and
each survivor is extended by one more bin under every signature. The
search stops when the survivors have placed every box or when no further
bin can be filled.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Sequence

from cutplan.domain.entities import Bin, Box
from cutplan.domain.options import PackingOptions
from cutplan.domain.signatures import Signature, make_signatures
from cutplan.domain.value_objects import (
    BEST_X_LARGE,
    BEST_X_SMALL,
    BinType,
    ErrorCode,
    OptimizationLevel,
    PackStatus,
    WarningCode,
)
from cutplan.infrastructure.arena import PackerArena
from cutplan.infrastructure.deadline import Deadline
from cutplan.infrastructure.formatters import format_packers
from cutplan.infrastructure.packer import Packer, PackingInternalError
from cutplan.infrastructure.ranking import filter_best_packers
from cutplan.infrastructure.results import PackingResult

logger = logging.getLogger(__name__)

_BEST_X_BY_LEVEL = {
    OptimizationLevel.MEDIUM: BEST_X_SMALL,
    OptimizationLevel.ADVANCED: BEST_X_LARGE,
}


class PackEngine:
    """One packing session: register boxes and bins, then run once.

    Attributes:
        options: Options of the session.
        boxes: Registered boxes; after a run, only the boxes fitting some bin.
        bins: Registered bins; after a run, only the usable ones, indexed.
        invalid_boxes: Boxes larger than every usable bin.
        invalid_bins: Offcuts that cannot host any box.
        warnings: Non-fatal problems found while registering input.
        errors: Error codes raised by the run.
        elapsed: Search time of the last run in seconds.
    """

    def __init__(
        self,
        options: PackingOptions,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options = options
        self._clock = clock

        self.bins: list[Bin] = []
        self.invalid_bins: list[Bin] = []
        self.boxes: list[Box] = []
        self.invalid_boxes: list[Box] = []

        self.warnings: list[WarningCode] = []
        self.errors: list[ErrorCode] = []
        self.elapsed = 0.0

        self._max_length_bin = 0.0
        self._max_width_bin = 0.0
        self._next_bin_index = 0
        self._arena = PackerArena()
        self._has_run = False

    def add_bin(
        self,
        length: float,
        width: float,
        bin_type: BinType = BinType.USER_DEFINED,
    ) -> None:
        """Register an offcut or sheet; illegal sizes only raise a warning."""
        if length <= 0 or width <= 0:
            logger.warning("Ignoring bin with illegal size %s x %s", length, width)
            self.warnings.append(WarningCode.ILLEGAL_SIZED_BIN)
            return
        self.bins.append(Bin(length, width, bin_type, self.options.trim_size))

    def add_box(
        self,
        length: float,
        width: float,
        rotatable: bool = True,
        data: Any = None,
    ) -> None:
        """Register a box to pack; illegal sizes only raise a warning."""
        if length <= 0 or width <= 0:
            logger.warning("Ignoring box with illegal size %s x %s", length, width)
            self.warnings.append(WarningCode.ILLEGAL_SIZED_BOX)
            return
        self.boxes.append(Box(length, width, rotatable, data, box_id=len(self.boxes)))

    def valid_input(self) -> bool:
        """Check that there is something to pack and somewhere to pack it."""
        if not self.boxes:
            self.errors.append(ErrorCode.NO_BOX)
        if not self.bins and not self.options.has_base_stock:
            self.errors.append(ErrorCode.NO_BIN)
        return not self.errors

    def bins_available(self) -> bool:
        """Keep the bins and boxes that can take part in the packing.

        Without explicit bins a single base stock bin is generated.
        Offcuts are sorted by increasing area and kept only if at least one
        box fits them; the others become invalid bins. Boxes that fit no
        kept bin and no base stock become invalid boxes.

        Returns:
            True if at least one bin and one box remain.
        """
        trim = self.options.trim_size
        self._next_bin_index = 0

        if self.options.has_base_stock:
            self._max_length_bin = self.options.base_usable_length
            self._max_width_bin = self.options.base_usable_width

        if not self.bins:
            base = Bin(
                self.options.base_length,
                self.options.base_width,
                BinType.AUTO_GENERATED,
                trim,
                index=self._next_bin_index,
            )
            self._next_bin_index += 1
            self.bins = [base]
        else:
            valid_bins: list[Bin] = []
            for bin_ in sorted(self.bins, key=lambda b: b.area):
                if any(
                    box.fits_into(bin_.usable_length, bin_.usable_width)
                    for box in self.boxes
                ):
                    self._max_length_bin = max(self._max_length_bin, bin_.usable_length)
                    self._max_width_bin = max(self._max_width_bin, bin_.usable_width)
                    valid_bins.append(bin_.with_index(self._next_bin_index))
                    self._next_bin_index += 1
                else:
                    self.invalid_bins.append(bin_)
            self.bins = valid_bins

        fitting: list[Box] = []
        for box in self.boxes:
            if box.fits_into(self._max_length_bin, self._max_width_bin):
                fitting.append(box)
            else:
                self.invalid_boxes.append(box)
        self.boxes = fitting

        if self.invalid_bins or self.invalid_boxes:
            logger.info(
                "%d invalid bin(s), %d invalid box(es)",
                len(self.invalid_bins),
                len(self.invalid_boxes),
            )
        return bool(self.bins) and bool(self.boxes)

    def pack_next(
        self,
        previous_packers: Sequence[Packer] | None,
        signatures: Sequence[Signature],
        deadline: Deadline,
    ) -> tuple[list[Packer], bool]:
        """Pack one more bin from each previous packer under every signature.

        Returns:
            The successful packers and whether the deadline expired.
        """
        if previous_packers is None:
            return self.pack_next_bin(None, signatures, deadline)

        packers: list[Packer] = []
        for previous in previous_packers:
            children, timed_out = self.pack_next_bin(previous, signatures, deadline)
            packers.extend(children)
            if timed_out:
                return packers, True
        return packers, False

    def pack_next_bin(
        self,
        previous: Packer | None,
        signatures: Sequence[Signature],
        deadline: Deadline,
    ) -> tuple[list[Packer], bool]:
        """Try every signature on the bin following ``previous``."""
        packers: list[Packer] = []
        for signature in signatures:
            if previous is None:
                packer = Packer(signature, self.options, self.bins, self.boxes)
            else:
                packer = Packer.continue_from(previous, signature, self.options)
            status = packer.pack(deadline)
            if status == PackStatus.TIMEOUT:
                return packers, True
            if status == PackStatus.PACKED:
                self._arena.add(packer)
                packers.append(packer)
        return packers, False

    @staticmethod
    def packings_done(packers: Sequence[Packer] | None) -> bool:
        """True when there is nothing left to extend."""
        if not packers:
            return True
        return all(packer.is_done for packer in packers)

    def run(self) -> tuple[PackingResult | None, ErrorCode]:
        """Validate input, search the packer tree and return the best packing.

        Returns:
            The best packing and ErrorCode.NONE, or None and the error code
            that stopped the run.

        Raises:
            RuntimeError: If the engine has already been run.
        """
        if self._has_run:
            raise RuntimeError("A PackEngine can only be run once")
        self._has_run = True

        if not self.valid_input():
            return None, self.errors[0]

        if not self.bins_available():
            return self._fail(ErrorCode.NO_BIN)

        best_x = _BEST_X_BY_LEVEL.get(self.options.optimization)
        if best_x is None:
            logger.error("Unsupported optimization level %r", self.options.optimization)
            return self._fail(ErrorCode.INVALID_INPUT)
        signatures = make_signatures(self.options.optimization, self.options.stacking)

        deadline = self._start_timer(len(signatures))
        try:
            packers, timed_out = self.pack_next(None, signatures, deadline)
            if timed_out:
                return self._timeout(deadline)
            if not packers:
                return self._fail(ErrorCode.NO_PLACEMENT_POSSIBLE)

            last_packers = self._survivors(packers, best_x)
            while not self.packings_done(last_packers):
                packers, timed_out = self.pack_next(last_packers, signatures, deadline)
                if timed_out:
                    return self._timeout(deadline)
                if not packers:
                    logger.info("No further bin can be filled, stopping search")
                    break
                last_packers = self._survivors(packers, best_x)
        except PackingInternalError:
            logger.exception("Internal fault in packing engine")
            return self._fail(ErrorCode.INTERNAL_FAULT)

        self._stop_timer(
            deadline,
            len(signatures),
            f"{last_packers[0].gstat.nb_packed_bins} bin(s)",
        )

        for packer in last_packers:
            packer.add_invalid_boxes(self.invalid_boxes)
            packer.add_invalid_bins(self.invalid_bins)

        # Survivors are ordered by rank, not by efficiency.
        best = last_packers[0]
        result = PackingResult.from_chain(self._arena.chain(best.index), self.warnings)
        return result, ErrorCode.NONE

    def _survivors(self, packers: Sequence[Packer], best_x: int) -> list[Packer]:
        survivors = filter_best_packers(packers, best_x)
        for packer in survivors:
            self._arena.put(packer)
        self._arena.retain(packer.index for packer in survivors)
        if self.options.debug:
            logger.debug("Survivors:\n%s", format_packers(survivors, self._arena))
        return survivors

    def _fail(self, code: ErrorCode) -> tuple[None, ErrorCode]:
        self.errors.append(code)
        logger.info("Packing failed: %s", code.value)
        return None, code

    def _timeout(self, deadline: Deadline) -> tuple[None, ErrorCode]:
        # Partial progress is discarded so that a run never returns a
        # layout that depends on machine speed.
        self.elapsed = deadline.elapsed()
        logger.warning("Packing timed out after %.3f s", self.elapsed)
        return self._fail(ErrorCode.TIMEOUT)

    def _start_timer(self, signature_count: int) -> Deadline:
        logger.debug(
            "Start of packing with %d box(es), %d bin(s) and %d signature(s)",
            len(self.boxes),
            len(self.bins),
            signature_count,
        )
        return Deadline(self.options.timeout, self._clock)

    def _stop_timer(self, deadline: Deadline, signature_count: int, message: str) -> None:
        self.elapsed = deadline.elapsed()
        logger.debug(
            "End of packing with %d signature(s), time = %.4f s, %s",
            signature_count,
            self.elapsed,
            message,
        )
