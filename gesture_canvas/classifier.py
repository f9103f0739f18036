"""
Classifier Module - Drawing Recognition
========================================
Recognizes what the user drew. Supports Hugging Face backends (hosted
image classification) and a mock backend for offline use and tests.

A classifier that fails to initialize stays in a standing "unavailable"
state: analysis is refused, drawing keeps working.
"""

import os
import time
import threading
import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from .sketch_processor import SketchProcessor

logger = logging.getLogger(__name__)


# Classes of the bundled emoji-doodle model
EMOJI_CLASSES = ("bow", "heart", "mountain", "ramen")

DEFAULT_MODEL_ID = "google/vit-base-patch16-224"
HF_INFERENCE_URL = "https://router.huggingface.co/hf-inference/models/{model_id}"


class ClassifierBackend(Enum):
    """Available drawing recognition backends."""
    HUGGINGFACE_INFERENCE = auto()  # huggingface_hub InferenceClient
    HUGGINGFACE_HTTP = auto()       # Raw HTTP to the inference endpoint
    MOCK = auto()                   # Offline, deterministic


@dataclass
class ClassificationResult:
    """Top label of one classification."""
    label: str
    confidence: float


class AnalysisStatus(Enum):
    OK = auto()
    EMPTY_CANVAS = auto()
    UNAVAILABLE = auto()
    BUSY = auto()
    ERROR = auto()


@dataclass
class AnalysisResult:
    """Outcome of an analyze request."""
    status: AnalysisStatus
    label: Optional[str] = None
    confidence: Optional[float] = None
    error: Optional[str] = None
    analysis_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == AnalysisStatus.OK

    @property
    def message(self) -> str:
        """User-facing status line."""
        if self.status == AnalysisStatus.OK:
            return f"I see a {self.label}! (Confidence: {round(self.confidence * 100)}%)"
        if self.status == AnalysisStatus.EMPTY_CANVAS:
            return "Please draw something first!"
        if self.status == AnalysisStatus.UNAVAILABLE:
            return "Error: Could not load the AI model."
        if self.status == AnalysisStatus.BUSY:
            return "Analysis already in progress..."
        return f"Error: {self.error}"


class DrawingClassifier:
    """
    Classifies a drawing (RGBA persistent-layer snapshot) into a label.

    Backend construction problems are recorded, not raised: check
    `available` and `error`.
    """

    def __init__(
        self,
        backend: ClassifierBackend = ClassifierBackend.HUGGINGFACE_INFERENCE,
        api_key: Optional[str] = None,
        model_id: Optional[str] = None,
        processor: Optional[SketchProcessor] = None
    ):
        """
        Initialize the classifier.

        Args:
            backend: Which backend to use
            api_key: API key (HF_TOKEN for Hugging Face)
            model_id: Image classification model on the Hub
            processor: Preprocessor for drawings (default 192x192)
        """
        self.backend = backend
        self.api_key = api_key or os.environ.get('HF_TOKEN', '') or os.environ.get('HF_API_KEY', '')
        self.model_id = model_id or os.environ.get('GESTURE_CANVAS_MODEL', '') or DEFAULT_MODEL_ID
        self.processor = processor or SketchProcessor()

        self._client = None
        self._session = None
        self._error: Optional[str] = None

        self._init_backend()

    def _init_backend(self):
        """Initialize the selected backend."""
        if not self.api_key:
            self._error = "HF_TOKEN is not set"
            logger.warning("Classifier unavailable: %s", self._error)
            return

        try:
            if self.backend == ClassifierBackend.HUGGINGFACE_INFERENCE:
                from huggingface_hub import InferenceClient

                self._client = InferenceClient(api_key=self.api_key)
                logger.info("Using Hugging Face Inference API (%s)", self.model_id)

            elif self.backend == ClassifierBackend.HUGGINGFACE_HTTP:
                import requests

                self._session = requests.Session()
                self._session.headers.update({
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "image/png",
                })
                logger.info("Using Hugging Face HTTP endpoint (%s)", self.model_id)

            else:
                raise ValueError(f"Unsupported backend: {self.backend}")

        except Exception as e:
            self._error = str(e)
            logger.exception("Failed to initialize classifier backend %s", self.backend.name)

    @property
    def available(self) -> bool:
        return self._error is None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def classify(self, drawing: np.ndarray) -> ClassificationResult:
        """
        Classify a drawing.

        Args:
            drawing: RGBA image of the persistent layer

        Returns:
            Top label and its confidence

        Raises:
            RuntimeError: if the classifier is unavailable
        """
        if not self.available:
            raise RuntimeError(f"Classifier unavailable: {self._error}")

        image_bytes = self.processor.to_png_bytes(drawing)

        if self.backend == ClassifierBackend.HUGGINGFACE_INFERENCE:
            return self._classify_hf_inference(image_bytes)
        return self._classify_hf_http(image_bytes)

    def _classify_hf_inference(self, image_bytes: bytes) -> ClassificationResult:
        outputs = self._client.image_classification(image_bytes, model=self.model_id)
        if not outputs:
            raise ValueError("Classifier returned no labels")

        best = max(outputs, key=lambda item: item.score)
        return ClassificationResult(label=best.label, confidence=float(best.score))

    def _classify_hf_http(self, image_bytes: bytes) -> ClassificationResult:
        url = HF_INFERENCE_URL.format(model_id=self.model_id)
        response = self._session.post(url, data=image_bytes, timeout=30)

        if response.status_code != 200:
            raise RuntimeError(f"API error: {response.status_code} - {response.text}")

        outputs = response.json()
        if not outputs:
            raise ValueError("Classifier returned no labels")

        best = max(outputs, key=lambda item: item['score'])
        return ClassificationResult(label=best['label'], confidence=float(best['score']))


class MockDrawingClassifier(DrawingClassifier):
    """
    Offline classifier for testing without API access.
    Picks one of EMOJI_CLASSES from simple shape statistics.
    """

    def __init__(self, processor: Optional[SketchProcessor] = None):
        """Initialize mock classifier."""
        self.backend = ClassifierBackend.MOCK
        self.api_key = ''
        self.model_id = 'mock'
        self.processor = processor or SketchProcessor()
        self._client = None
        self._session = None
        self._error = None

    def classify(self, drawing: np.ndarray) -> ClassificationResult:
        stats = self.processor.analyze_sketch(drawing)

        if stats['num_shapes'] == 0:
            return ClassificationResult(label=EMOJI_CLASSES[0], confidence=0.0)

        # Wide shapes read as mountains, tall ones as bows, dense ones as ramen
        if stats['aspect_ratio'] > 1.5:
            label = 'mountain'
        elif stats['aspect_ratio'] < 0.67:
            label = 'bow'
        elif stats['density'] > 0.5:
            label = 'ramen'
        else:
            label = 'heart'

        confidence = min(0.5 + 0.1 * stats['num_shapes'], 0.9)
        return ClassificationResult(label=label, confidence=confidence)


class DrawingAnalyzer:
    """
    Runs classification for the session, synchronously or on a worker thread.

    At most one background analysis runs at a time.
    """

    def __init__(self, classifier: Optional[DrawingClassifier]):
        self.classifier = classifier

        self._is_analyzing = False
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._last_result: Optional[AnalysisResult] = None

    @property
    def available(self) -> bool:
        return self.classifier is not None and self.classifier.available

    def analyze(self, drawing: np.ndarray) -> AnalysisResult:
        """
        Classify a drawing now.

        Classification errors are reported in the result, never raised.
        """
        if not self.available:
            error = self.classifier.error if self.classifier else "No classifier configured"
            return AnalysisResult(status=AnalysisStatus.UNAVAILABLE, error=error)

        start_time = time.time()
        try:
            result = self.classifier.classify(drawing)
        except Exception as e:
            logger.exception("Drawing classification failed")
            return AnalysisResult(
                status=AnalysisStatus.ERROR,
                error=str(e),
                analysis_time=time.time() - start_time
            )

        analysis = AnalysisResult(
            status=AnalysisStatus.OK,
            label=result.label,
            confidence=result.confidence,
            analysis_time=time.time() - start_time
        )
        logger.info("Analysis: %s (%.2f) in %.2fs", analysis.label, analysis.confidence,
                    analysis.analysis_time)
        return analysis

    def submit(
        self,
        drawing: np.ndarray,
        on_complete: Optional[Callable[[AnalysisResult], None]] = None
    ) -> Optional[AnalysisResult]:
        """
        Classify a drawing on a background thread.

        Args:
            drawing: RGBA snapshot; the caller must not mutate it afterwards
            on_complete: Called with the result from the worker thread

        Returns:
            None when the job started, or a BUSY/UNAVAILABLE result
        """
        if not self.available:
            return self.analyze(drawing)

        with self._lock:
            if self._is_analyzing:
                return AnalysisResult(status=AnalysisStatus.BUSY)
            self._is_analyzing = True

        self._thread = threading.Thread(
            target=self._analyze_async,
            args=(drawing, on_complete),
            daemon=True
        )
        self._thread.start()
        return None

    def _analyze_async(self, drawing: np.ndarray, on_complete):
        try:
            result = self.analyze(drawing)
            self._last_result = result
        finally:
            with self._lock:
                self._is_analyzing = False

        if on_complete:
            on_complete(result)

    def is_analyzing(self) -> bool:
        return self._is_analyzing

    def get_last_result(self) -> Optional[AnalysisResult]:
        return self._last_result

    def wait(self, timeout: Optional[float] = None):
        """Block until the current background analysis finishes."""
        if self._thread is not None:
            self._thread.join(timeout)


def create_classifier(
    use_mock: bool = False,
    api_key: Optional[str] = None,
    model_id: Optional[str] = None,
    use_http: bool = False
) -> DrawingClassifier:
    """
    Factory function to create a drawing classifier.

    Args:
        use_mock: If True, use the offline mock classifier
        api_key: API key for Hugging Face (HF_TOKEN)
        model_id: Hub model id (GESTURE_CANVAS_MODEL)
        use_http: Talk to the inference endpoint with requests instead of
            huggingface_hub

    Environment Variables:
        HF_TOKEN: Hugging Face API token (preferred)
        HF_API_KEY: Alternative name for HF token
        GESTURE_CANVAS_MODEL: Image classification model id
    """
    if use_mock:
        return MockDrawingClassifier()

    key = api_key or os.environ.get('HF_TOKEN', '') or os.environ.get('HF_API_KEY', '')
    if not key:
        logger.info("No HF_TOKEN found. Using mock classifier.")
        return MockDrawingClassifier()

    backend = ClassifierBackend.HUGGINGFACE_HTTP if use_http else ClassifierBackend.HUGGINGFACE_INFERENCE
    return DrawingClassifier(backend=backend, api_key=key, model_id=model_id)
