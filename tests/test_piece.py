import unittest

from trichromino.core.constants import BaseShade
from trichromino.core.exceptions import BoundsError, OccupancyError
from trichromino.engine.piece import Piece


def l_piece() -> Piece:
    piece = Piece(4, 4, BaseShade.WHITE)
    piece.add_square(1, 1)
    piece.add_square(1, 2)
    piece.add_square(2, 2)
    return piece


class PieceConstructionTests(unittest.TestCase):
    def test_rejects_non_positive_dimensions(self) -> None:
        with self.assertRaises(ValueError):
            Piece(0, 3, BaseShade.WHITE)
        with self.assertRaises(ValueError):
            Piece(3, -1, BaseShade.BLACK)

    def test_rejects_empty_color(self) -> None:
        with self.assertRaises(ValueError):
            Piece(2, 2, BaseShade.EMPTY)

    def test_new_piece_is_empty(self) -> None:
        piece = Piece(2, 3, BaseShade.BLACK)
        self.assertTrue(piece.is_empty())
        self.assertEqual(piece.num_squares, 0)
        self.assertFalse(piece.sealed)


class PieceEditingTests(unittest.TestCase):
    def test_add_and_remove_square(self) -> None:
        piece = Piece(2, 2, BaseShade.WHITE)
        piece.add_square(0, 1)
        self.assertTrue(piece.is_square(0, 1))
        piece.remove_square(0, 1)
        self.assertFalse(piece.is_square(0, 1))

    def test_out_of_bounds_square(self) -> None:
        piece = Piece(2, 2, BaseShade.WHITE)
        with self.assertRaises(BoundsError):
            piece.add_square(2, 0)
        # BoundsError is also an IndexError for callers that only know builtins.
        with self.assertRaises(IndexError):
            piece.remove_square(0, -1)

    def test_sealed_piece_cannot_be_edited(self) -> None:
        cropped = l_piece().crop()
        with self.assertRaises(OccupancyError):
            cropped.add_square(0, 0)
        with self.assertRaises(OccupancyError):
            cropped.remove_square(0, 0)


class PieceCropTests(unittest.TestCase):
    def test_crop_trims_to_bounding_box(self) -> None:
        cropped = l_piece().crop()
        self.assertEqual((cropped.width, cropped.height), (2, 2))
        self.assertEqual(list(cropped.squares()), [(0, 0), (0, 1), (1, 1)])
        self.assertTrue(cropped.sealed)
        self.assertEqual(cropped.color, BaseShade.WHITE)

    def test_crop_is_idempotent(self) -> None:
        cropped = l_piece().crop()
        self.assertEqual(cropped.crop(), cropped)

    def test_crop_of_empty_piece_fails(self) -> None:
        with self.assertRaises(OccupancyError):
            Piece(3, 3, BaseShade.BLACK).crop()

    def test_from_cells_matches_manual_crop(self) -> None:
        piece = Piece.from_cells([(5, 5), (5, 6), (6, 6)], BaseShade.WHITE)
        self.assertEqual(piece, l_piece().crop())

    def test_equality_includes_color(self) -> None:
        white = Piece.from_cells([(0, 0), (1, 0)], BaseShade.WHITE)
        black = Piece.from_cells([(0, 0), (1, 0)], BaseShade.BLACK)
        self.assertNotEqual(white, black)


class PieceSerializationTests(unittest.TestCase):
    def test_from_jsonable_restores_sealed_piece(self) -> None:
        piece = l_piece().crop()
        restored = Piece.from_jsonable(piece.to_jsonable())
        self.assertEqual(restored, piece)
        self.assertTrue(restored.sealed)

    def test_from_jsonable_rejects_loose_sealed_matrix(self) -> None:
        payload = {
            "color": "white",
            "rows": [["white", "empty"], ["empty", "empty"]],
            "sealed": True,
        }
        with self.assertRaises(ValueError):
            Piece.from_jsonable(payload)

    def test_from_jsonable_rejects_foreign_color(self) -> None:
        payload = {"color": "white", "rows": [["black"]], "sealed": True}
        with self.assertRaises(ValueError):
            Piece.from_jsonable(payload)


if __name__ == "__main__":
    unittest.main()
