"""
Unit tests for the Vector container and ModelParameters.
"""

import dataclasses

import numpy as np
import pytest
from PIL import Image

from dim.core.types import MAX_SEED, ChatRequest, ModelParameters, SubjectType
from dim.core.vector import Vector


class TestVector:
    """Tests for Vector."""

    def test_from_image(self):
        test_image = Image.new("RGBA", (2, 2), (255, 255, 255, 255))

        my_vector = Vector.from_image(test_image)

        assert my_vector.get_vector().tolist() == []
        assert my_vector.get_data() is test_image
        assert my_vector.get_data_type() == SubjectType.IMAGE
        assert my_vector.dimensionality == 0

    def test_from_text(self):
        my_vector = Vector.from_text("Hello, world!")

        assert my_vector.get_vector().tolist() == []
        assert my_vector.get_data() == "Hello, world!"
        assert my_vector.subject_type == SubjectType.TEXT
        assert my_vector.dimensionality == 0

    def test_overwrite_vector(self):
        my_vector = Vector.from_text("Testing vector ops")

        my_vector.overwrite_vector([1.0, 2.0, 3.0])

        assert my_vector.get_vector().tolist() == [1.0, 2.0, 3.0]
        assert my_vector.get_vector().dtype == np.float32
        assert my_vector.dimensionality == 3

        my_vector.overwrite_vector([4.0])
        assert my_vector.get_vector().tolist() == [4.0]

    def test_get_vector_returns_copy(self):
        my_vector = Vector.from_text("copy")
        my_vector.overwrite_vector([1.0, 2.0])

        copy = my_vector.get_vector()
        copy[0] = 99.0

        assert my_vector.get_vector().tolist() == [1.0, 2.0]

    def test_vector_view_is_read_only(self):
        my_vector = Vector.from_text("view")
        my_vector.overwrite_vector([1.0])

        with pytest.raises(ValueError):
            my_vector.vector[0] = 2.0

    def test_to_dict(self):
        my_vector = Vector.from_text("dict")
        my_vector.overwrite_vector([0.5, 7.0])

        assert my_vector.to_dict() == {
            "subject_type": "text",
            "dimensionality": 2,
            "vector": [0.5, 7.0],
        }


class TestModelParameters:
    """Tests for ModelParameters."""

    def test_defaults(self):
        params = ModelParameters(model="minicpm-v")

        assert params.temperature == 0.0
        assert params.seed is None
        assert params.validate() == []

    def test_frozen(self):
        params = ModelParameters(model="minicpm-v")

        with pytest.raises(dataclasses.FrozenInstanceError):
            params.seed = 3

    def test_for_run_generates_seed(self):
        params = ModelParameters(model="minicpm-v")

        run_params = params.for_run()

        assert run_params.seed is not None
        assert 0 <= run_params.seed <= MAX_SEED
        assert run_params.model == "minicpm-v"
        assert params.seed is None

    def test_for_run_keeps_explicit_seed(self):
        params = ModelParameters(model="minicpm-v", seed=99)

        assert params.for_run() is params

    @pytest.mark.parametrize("kwargs", [
        {"model": ""},
        {"model": "m", "temperature": -0.5},
        {"model": "m", "temperature": 2.5},
        {"model": "m", "seed": "abc"},
    ])
    def test_validate_rejects(self, kwargs):
        assert ModelParameters(**kwargs).validate()


class TestChatRequest:
    """Tests for ChatRequest."""

    def test_to_payload(self):
        request = ChatRequest(
            model="m",
            messages=[{"role": "user", "content": "hi"}],
            temperature=0.2,
            seed=5,
        )

        payload = request.to_payload()

        assert payload == {
            "model": "m",
            "messages": [{"role": "user", "content": "hi"}],
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "stream": False,
            "seed": 5,
        }

    def test_to_payload_without_seed(self):
        request = ChatRequest(model="m", messages=[])

        assert "seed" not in request.to_payload()
