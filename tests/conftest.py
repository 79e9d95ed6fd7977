"""Shared test fixtures for image retrieval tests."""

import numpy as np
import cv2
import pytest


@pytest.fixture
def blue_image():
    """Generate a 30x30 pure blue image (BGR)."""
    img = np.zeros((30, 30, 3), dtype=np.uint8)
    img[:, :] = [255, 0, 0]
    return img


@pytest.fixture
def sky_over_grass_image():
    """Generate a 60x60 image: blue top half, green bottom half."""
    img = np.zeros((60, 60, 3), dtype=np.uint8)
    img[:30] = [220, 120, 40]
    img[30:] = [40, 180, 60]
    return img


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [30, 30, 200]
    return img


@pytest.fixture
def blue_circle_image():
    """Generate a 200x200 blue circle on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    cv2.circle(img, (100, 100), 60, (200, 30, 30), -1)
    return img


@pytest.fixture
def textured_image():
    """Generate a 200x200 checkerboard (strong edges)."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 200
    for y in range(0, 200, 20):
        for x in range(0, 200, 20):
            if (x // 20 + y // 20) % 2 == 0:
                img[y:y+20, x:x+20] = [50, 50, 50]
    return img


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def image_dir(tmp_path, red_square_image, blue_circle_image, textured_image):
    """Directory with three PNG images, one tiny image and a text file."""
    directory = tmp_path / "images"
    directory.mkdir()
    cv2.imwrite(str(directory / "pic.0001.png"), red_square_image)
    cv2.imwrite(str(directory / "pic.0002.png"), blue_circle_image)
    cv2.imwrite(str(directory / "pic.0003.png"), textured_image)
    cv2.imwrite(str(directory / "tiny.png"), np.zeros((4, 4, 3), dtype=np.uint8))
    (directory / "notes.txt").write_text("not an image")
    return directory
