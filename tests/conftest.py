import random

import pytest

from chip8 import VM, Quirks


def load_words(vm, *words):
    """Load 16-bit instruction words at the program start."""
    data = bytearray()
    for word in words:
        data += word.to_bytes(2, "big")
    vm.load_program(bytes(data))


@pytest.fixture
def vm():
    return VM(rng=random.Random(1234))


@pytest.fixture
def make_vm():
    def _make(**quirks):
        return VM(quirks=Quirks(**quirks), rng=random.Random(1234))
    return _make


@pytest.fixture
def load():
    return load_words
