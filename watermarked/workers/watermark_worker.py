"""
Watermark Worker - Async Batch Watermarking
===========================================
QThread worker running the full watermark pipeline for a queue of images.

Workflow:
1. For each job in the queue:
   a. Validate the source image (and the watermark image, if any)
   b. Load the source image
   c. Add the text or image watermark
   d. Save next to the original as <name>_watermarked<ext>
2. Emit progress signals during processing
3. Emit finished signal with results

A job with a watermark_path is an image watermark, otherwise a text
watermark.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QThread, pyqtSignal

from ..core.engine import Watermarker
from ..core.options import WatermarkOptions
from ..errors import WatermarkError
from ..fileio.codec import DEFAULT_QUALITY, load_image, save_image
from ..fileio.validation import output_path_for, validate_image

logger = logging.getLogger(__name__)


@dataclass
class WatermarkJob:
    """One image to watermark."""
    image_path: Path
    options: WatermarkOptions
    watermark_path: Optional[Path] = None

    @property
    def is_image_watermark(self) -> bool:
        return self.watermark_path is not None


@dataclass
class WatermarkResult:
    """Result of watermarking a single image."""
    source_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error_message: str = ""


class JobError(WatermarkError):
    """A pipeline step failed; the message names the step."""


def run_job(watermarker: Watermarker, job: WatermarkJob, quality: int = DEFAULT_QUALITY) -> Path:
    """
    Validate, load, watermark and save one image.

    Args:
        watermarker: Engine to use.
        job: The job to run.
        quality: JPEG quality for the output.

    Returns:
        Path of the written image.

    Raises:
        JobError: If any step fails. The original exception is chained.
    """
    try:
        image_path = validate_image(job.image_path)
    except (OSError, ValueError) as e:
        raise JobError(f"invalid image: {e}") from e

    watermark_path = None
    if job.is_image_watermark:
        try:
            watermark_path = validate_image(job.watermark_path)
        except (OSError, ValueError) as e:
            raise JobError(f"invalid watermark image: {e}") from e

    try:
        source = load_image(image_path)
    except WatermarkError as e:
        raise JobError(f"failed to load image: {e}") from e

    try:
        if watermark_path is not None:
            result = watermarker.add_image_watermark(source, watermark_path, job.options)
        else:
            result = watermarker.add_text_watermark(source, job.options)
    except WatermarkError as e:
        raise JobError(f"failed to add watermark: {e}") from e

    try:
        return save_image(result, output_path_for(image_path), quality)
    except (WatermarkError, OSError) as e:
        raise JobError(f"failed to save image: {e}") from e


class WatermarkWorker(QThread):
    """
    Worker thread for watermarking a batch of images.

    Signals:
        progress(int, int, str): (current, total, current_file_name)
        image_completed(WatermarkResult): Emitted when each image is processed
        finished_all(list[WatermarkResult]): Emitted when all images are done
        error(str): Emitted on critical errors
    """

    # Signals
    progress = pyqtSignal(int, int, str)  # current, total, filename
    image_completed = pyqtSignal(object)  # WatermarkResult
    finished_all = pyqtSignal(list)  # List[WatermarkResult]
    error = pyqtSignal(str)  # Error message

    def __init__(
            self,
            jobs: List[WatermarkJob],
            watermarker: Optional[Watermarker] = None,
            quality: int = DEFAULT_QUALITY,
            parent=None
    ):
        """
        Initialize the watermark worker.

        Args:
            jobs: Images to process, in order.
            watermarker: Engine to use. If None, one is created in run().
            quality: JPEG quality for the outputs.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.jobs = list(jobs)
        self.quality = quality
        self._watermarker = watermarker
        self._is_cancelled = False

    def cancel(self):
        """Request cancellation; the current image is finished first."""
        self._is_cancelled = True

    def _process_single_image(self, job: WatermarkJob) -> WatermarkResult:
        result = WatermarkResult(source_path=Path(job.image_path))
        try:
            result.output_path = run_job(self._watermarker, job, self.quality)
            result.success = True
            logger.info("Watermarked %s -> %s", job.image_path, result.output_path)
        except JobError as e:
            result.error_message = str(e)
            logger.error("Watermarking %s failed: %s", job.image_path, e)
        return result

    def run(self):
        """
        Main worker execution.

        Processes all jobs and emits progress signals.
        """
        results: List[WatermarkResult] = []
        total = len(self.jobs)

        if total == 0:
            self.error.emit("No images to process")
            self.finished_all.emit(results)
            return

        if self._watermarker is None:
            try:
                self._watermarker = Watermarker()
            except WatermarkError as e:
                logger.exception("Cannot create watermark engine")
                self.error.emit(f"Critical error: {e}")
                self.finished_all.emit(results)
                return

        try:
            for idx, job in enumerate(self.jobs):
                if self._is_cancelled:
                    break

                self.progress.emit(idx + 1, total, Path(job.image_path).name)

                result = self._process_single_image(job)
                results.append(result)

                self.image_completed.emit(result)

        except Exception as e:
            logger.exception("Watermark batch aborted")
            self.error.emit(f"Critical error: {str(e)}")

        # Emit final results
        self.finished_all.emit(results)
