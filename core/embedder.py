"""
Face detection + 128-d embedding

MediaPipe finds the face, dlib (through face_recognition) computes the
128-float descriptor and 68-point landmarks for it.
"""
import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import cv2
import face_recognition
import mediapipe as mp
import numpy as np

from config import settings, thresholds
from core.errors import AcquisitionError

logger = logging.getLogger(__name__)


@dataclass
class Detection:
    embedding: List[float]
    box: Tuple[int, int, int, int]  # x, y, w, h in the original frame
    score: float
    landmarks: dict = field(default_factory=dict)


class FaceEmbeddingProvider:
    """Single-face detector and embedder"""
    _instance = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, score_threshold=None, input_size=None):
        if self._initialized:
            return

        self.score_threshold = (thresholds.DETECTION_SCORE_THRESHOLD
                                if score_threshold is None else score_threshold)
        self.input_size = input_size or settings.DETECTION_INPUT_SIZE

        try:
            self.face_detection = mp.solutions.face_detection.FaceDetection(
                model_selection=0,
                min_detection_confidence=self.score_threshold
            )
        except Exception as e:
            raise AcquisitionError(f"Could not load face detection model: {e}") from e

        logger.info("Face models loaded (score>=%.2f, input=%dpx)",
                    self.score_threshold, self.input_size)
        self._initialized = True

    @staticmethod
    def load_image(data):
        """Decode JPEG/PNG bytes or a base64 (data URL) string to a BGR frame"""
        if isinstance(data, str):
            payload = data.split(',', 1)[1] if ',' in data else data
            try:
                data = base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise AcquisitionError("Image is not valid base64") from e

        frame = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            raise AcquisitionError("Could not decode image")
        return frame

    def _resize(self, frame):
        h, w = frame.shape[:2]
        scale = self.input_size / max(h, w)
        if scale >= 1.0:
            return frame, 1.0
        resized = cv2.resize(frame, (int(w * scale), int(h * scale)), interpolation=cv2.INTER_AREA)
        return resized, scale

    def detect(self, frame):
        """
        Detect the most confident face and embed it

        Returns:
            Detection, or None when no face clears the score threshold
        """
        if frame is None or frame.size == 0:
            return None

        small, scale = self._resize(frame)
        rgb = cv2.cvtColor(small, cv2.COLOR_BGR2RGB)
        results = self.face_detection.process(rgb)
        if not results.detections:
            return None

        best = max(results.detections, key=lambda d: d.score[0])
        h, w = small.shape[:2]
        bbox = best.location_data.relative_bounding_box
        x = max(0, int(bbox.xmin * w))
        y = max(0, int(bbox.ymin * h))
        bw = min(int(bbox.width * w), w - x)
        bh = min(int(bbox.height * h), h - y)
        if bw <= 0 or bh <= 0:
            return None

        # face_recognition wants (top, right, bottom, left)
        location = [(y, x + bw, y + bh, x)]
        encodings = face_recognition.face_encodings(rgb, known_face_locations=location)
        if not encodings:
            return None
        landmarks = face_recognition.face_landmarks(rgb, face_locations=location)

        box = tuple(int(v / scale) for v in (x, y, bw, bh))
        return Detection(
            embedding=encodings[0].tolist(),
            box=box,
            score=float(best.score[0]),
            landmarks=landmarks[0] if landmarks else {},
        )
