"""Tests for single and batch moves."""

import asyncio
import os

import pytest

from serverfs.core.errors import InvalidArgumentType, LengthMismatch, SelfMove, TypeMismatch


def test_move_single(fs, root):
    (root / "old.txt").write_text("data")
    asyncio.run(fs.move("old.txt", "archive/new.txt"))
    assert not (root / "old.txt").exists()
    assert (root / "archive" / "new.txt").read_text() == "data"


def test_move_batch(fs, root):
    for name in ("a", "b", "c", "d", "e", "f", "g"):
        (root / f"{name}.txt").write_text(name)
    sources = [f"{name}.txt" for name in "abcdefg"]
    targets = [f"moved/{name}.txt" for name in "abcdefg"]
    asyncio.run(fs.move(sources, targets))
    for name in "abcdefg":
        assert (root / "moved" / f"{name}.txt").read_text() == name


def test_move_array_and_scalar_is_type_mismatch(fs):
    with pytest.raises(TypeMismatch):
        asyncio.run(fs.move(["a"], "b"))
    with pytest.raises(TypeMismatch):
        asyncio.run(fs.move("a", ["b"]))


def test_move_length_mismatch(fs, root):
    (root / "a").write_text("a")
    with pytest.raises(LengthMismatch):
        asyncio.run(fs.move(["a", "b"], ["c"]))
    assert (root / "a").exists()


def test_move_invalid_argument_type(fs):
    with pytest.raises(InvalidArgumentType):
        asyncio.run(fs.move(42, "b"))


@pytest.mark.parametrize("destination", ["world", "world/region", "world/region/deeper"])
def test_move_into_self_is_rejected(fs, root, destination):
    (root / "world" / "region").mkdir(parents=True)
    with pytest.raises(SelfMove):
        asyncio.run(fs.move("world", destination))
    assert (root / "world" / "region").is_dir()


def test_batch_self_move_mutates_nothing(fs, root):
    (root / "a.txt").write_text("a")
    (root / "world").mkdir()
    with pytest.raises(SelfMove):
        asyncio.run(fs.move(["a.txt", "world"], ["b.txt", "world/inner"]))
    assert (root / "a.txt").exists()
    assert not (root / "b.txt").exists()


def test_move_is_idempotent(fs, root):
    (root / "a.txt").write_text("a")
    asyncio.run(fs.move("a.txt", "b.txt"))
    asyncio.run(fs.move("a.txt", "b.txt"))
    assert not (root / "a.txt").exists()
    assert (root / "b.txt").read_text() == "a"


def test_existing_destination_is_not_clobbered(fs, root):
    (root / "a.txt").write_text("new")
    (root / "b.txt").write_text("old")
    asyncio.run(fs.move("a.txt", "b.txt"))
    assert (root / "a.txt").read_text() == "new"
    assert (root / "b.txt").read_text() == "old"


def test_batch_collision_does_not_abort(fs, root):
    (root / "a.txt").write_text("a")
    (root / "b.txt").write_text("b")
    (root / "taken.txt").write_text("taken")
    asyncio.run(fs.move(["a.txt", "b.txt"], ["taken.txt", "b2.txt"]))
    assert (root / "b2.txt").read_text() == "b"
    assert (root / "taken.txt").read_text() == "taken"


def test_batch_surfaces_hard_failure(fs, root):
    (root / "a.txt").write_text("a")
    with pytest.raises(FileNotFoundError):
        asyncio.run(fs.move(["a.txt", "missing.txt"], ["a2.txt", "missing2.txt"]))


def test_batch_with_shared_destination_moves_only_one(fs, root):
    (root / "one.txt").write_text("one")
    (root / "two.txt").write_text("two")

    asyncio.run(fs.move(["one.txt", "two.txt"], ["dest.txt", "dest.txt"]))

    moved = (root / "dest.txt").read_text()
    assert moved in ("one", "two")
    left_behind = "two" if moved == "one" else "one"
    assert (root / f"{left_behind}.txt").read_text() == left_behind
    assert not (root / f"{moved}.txt").exists()


def test_batch_with_shared_directory_destination_moves_only_one(fs, root):
    for name in ("alpha", "beta"):
        (root / name).mkdir()
        (root / name / "marker").write_text(name)

    asyncio.run(fs.move(["alpha", "beta"], ["world", "world"]))

    moved = (root / "world" / "marker").read_text()
    left_behind = "beta" if moved == "alpha" else "alpha"
    assert (root / left_behind / "marker").read_text() == left_behind
    assert not (root / moved).exists()


def test_move_symlink_moves_the_link(fs, root, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("outside")
    os.symlink(outside, root / "link")

    asyncio.run(fs.move("link", "renamed"))

    assert os.readlink(root / "renamed") == str(outside)
    assert not os.path.lexists(root / "link")
    assert outside.read_text() == "outside"
