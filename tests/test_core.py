import unittest

import numpy as np

from falling_blocks.game.core import Game, GameConfig, KeyCode
from falling_blocks.game.exceptions import ConfigurationError
from falling_blocks.game.geometry import Offset
from falling_blocks.game.grid import Cell
from falling_blocks.game.pieces import PIECE_ORDER, Piece, PieceKind


class ScriptedRandom:
    """Deals the given kinds in order, cycling when exhausted."""

    def __init__(self, *kinds):
        self.indices = [PIECE_ORDER.index(k) for k in kinds]
        self.calls = 0

    def randrange(self, stop):
        value = self.indices[self.calls % len(self.indices)]
        self.calls += 1
        return value


def make_game(*kinds, rows=20, cols=10):
    return Game(GameConfig(rows=rows, cols=cols), rng=ScriptedRandom(*kinds))


class TestSpawn(unittest.TestCase):

    def test_spawn_never_collides_on_empty_board(self):
        for kind in PieceKind:
            game = make_game(kind)
            self.assertEqual(game.position, Offset(5, 0))
            self.assertEqual(game.piece.kind, kind)
            self.assertFalse(game.grid.check_collision(game.position, game.piece.cells), kind.name)
            self.assertFalse(game.game_over)

    def test_lookahead_is_drawn_at_start(self):
        game = make_game(PieceKind.T, PieceKind.I)
        self.assertEqual(game.piece.kind, PieceKind.T)
        self.assertEqual(game.next_piece.kind, PieceKind.I)

    def test_invalid_configuration(self):
        with self.assertRaises(ConfigurationError):
            GameConfig(rows=0)
        with self.assertRaises(ConfigurationError):
            GameConfig(cols=-1)
        with self.assertRaises(ConfigurationError):
            GameConfig(cell_size_px=0)

    def test_same_seed_same_sequence(self):
        a = Game(GameConfig(random_seed=123))
        b = Game(GameConfig(random_seed=123))
        seq_a, seq_b = [], []
        for game, seq in ((a, seq_a), (b, seq_b)):
            for _ in range(10):
                seq.append(game.piece.kind)
                game.drop()
                game.update(10_000)
        self.assertEqual(seq_a, seq_b)


class TestMovement(unittest.TestCase):

    def test_o_piece_slides_to_the_left_wall_and_floor(self):
        game = make_game(PieceKind.O)
        for _ in range(3):
            self.assertTrue(game.move_left())
        self.assertEqual(game.position, Offset(2, 0))
        self.assertTrue(game.move_left())
        self.assertTrue(game.move_left())
        self.assertFalse(game.move_left())
        self.assertEqual(game.position, Offset(0, 0))

        self.assertEqual(game.drop(), 19)
        self.assertEqual(
            set(game.active_cells()),
            {Offset(0, 18), Offset(1, 18), Offset(0, 19), Offset(1, 19)},
        )

    def test_horizontal_moves_stay_inside(self):
        for kind in PieceKind:
            game = make_game(kind)
            for _ in range(15):
                game.move_right()
            self.assertTrue(all(c.x < game.grid.cols for c in game.active_cells()), kind.name)
            self.assertTrue(any(c.x == game.grid.cols - 1 for c in game.active_cells()), kind.name)
            for _ in range(15):
                game.move_left()
            self.assertTrue(all(c.x >= 0 for c in game.active_cells()), kind.name)
            self.assertTrue(any(c.x == 0 for c in game.active_cells()), kind.name)

    def test_drop_rests_on_floor(self):
        for kind in PieceKind:
            game = make_game(kind)
            rows = game.drop()
            self.assertGreater(rows, 0)
            self.assertTrue(all(c.y < game.grid.rows for c in game.active_cells()))
            self.assertTrue(any(c.y == game.grid.rows - 1 for c in game.active_cells()))
            self.assertFalse(game.move_down())
            self.assertEqual(game.drop(), 0)

    def test_drop_rests_on_filled_cell(self):
        game = make_game(PieceKind.I)
        game.grid.fill(5, 10)
        game.drop()
        self.assertEqual(game.position, Offset(5, 8))
        self.assertIn(Offset(5, 9), game.active_cells())

    def test_move_down_matches_drop(self):
        a = make_game(PieceKind.L)
        b = make_game(PieceKind.L)
        steps = 0
        while a.move_down():
            steps += 1
        self.assertEqual(b.drop(), steps)
        self.assertEqual(a.position, b.position)

    def test_cooldown_is_a_watermark(self):
        game = make_game(PieceKind.T)
        self.assertEqual(game.pacing.cooldown_ms, 0)
        game.move_left()
        self.assertEqual(game.pacing.cooldown_ms, 250)
        game.rotate()
        self.assertEqual(game.pacing.cooldown_ms, 400)
        game.move_right()
        self.assertEqual(game.pacing.cooldown_ms, 400)
        game.update(100)
        self.assertEqual(game.pacing.cooldown_ms, 300)
        game.move_down()
        game.drop()
        self.assertEqual(game.pacing.cooldown_ms, 300)

    def test_blocked_move_still_arms_cooldown(self):
        game = make_game(PieceKind.O)
        for _ in range(5):
            game.move_left()
        game.update(1000)
        self.assertLess(game.pacing.cooldown_ms, 0)
        self.assertFalse(game.move_left())
        self.assertEqual(game.pacing.cooldown_ms, 250)


class TestRotation(unittest.TestCase):

    def test_rotation_in_open_space(self):
        game = make_game(PieceKind.T)
        original = game.piece
        self.assertTrue(game.rotate())
        self.assertEqual(game.piece, original.rotated())
        self.assertEqual(game.position, Offset(5, 0))
        for _ in range(3):
            game.rotate()
        self.assertEqual(set(game.piece.cells), set(original.cells))

    def test_o_rotation_is_a_no_op(self):
        game = make_game(PieceKind.O)
        piece = game.piece
        self.assertFalse(game.rotate())
        self.assertIs(game.piece, piece)
        self.assertEqual(game.position, Offset(5, 0))
        self.assertEqual(game.pacing.cooldown_ms, 0)

    def _t_at_row_ten(self):
        game = make_game(PieceKind.T)
        for _ in range(10):
            game.move_down()
        self.assertEqual(game.position, Offset(5, 10))
        return game

    def test_kick_up_and_left(self):
        game = self._t_at_row_ten()
        game.grid.fill(5, 11)
        self.assertTrue(game.rotate())
        self.assertEqual(game.position, Offset(4, 9))
        self.assertEqual(game.piece, Piece.spawn(PieceKind.T).rotated())

    def test_kick_straight_up_when_left_is_blocked(self):
        game = self._t_at_row_ten()
        game.grid.fill(5, 11)
        game.grid.fill(3, 9)
        self.assertTrue(game.rotate())
        self.assertEqual(game.position, Offset(5, 9))

    def test_kick_up_and_right(self):
        game = self._t_at_row_ten()
        game.grid.fill(5, 11)
        game.grid.fill(3, 9)
        game.grid.fill(5, 8)
        self.assertTrue(game.rotate())
        self.assertEqual(game.position, Offset(6, 9))

    def test_failed_rotation_is_abandoned(self):
        game = make_game(PieceKind.I)
        for _ in range(5):
            game.move_left()
        self.assertEqual(game.position, Offset(0, 0))
        piece = game.piece
        # Horizontal I would need columns -2..1 and no kick reaches far enough
        self.assertFalse(game.rotate())
        self.assertIs(game.piece, piece)
        self.assertEqual(game.position, Offset(0, 0))
        self.assertEqual(game.pacing.cooldown_ms, 400)


class TestUpdate(unittest.TestCase):

    def test_piece_falls_after_delay(self):
        game = make_game(PieceKind.T)
        self.assertEqual(game.pacing.fall_delay_ms, 650)
        game.update(600)
        self.assertEqual(game.position, Offset(5, 0))
        game.update(50)
        # Exactly zero is not below zero
        self.assertEqual(game.position, Offset(5, 0))
        game.update(1)
        self.assertEqual(game.position, Offset(5, 1))
        self.assertEqual(game.pacing.fall_delay_ms, 650)

    def test_large_delta_moves_one_row(self):
        game = make_game(PieceKind.T)
        game.update(60_000)
        self.assertEqual(game.position, Offset(5, 1))
        self.assertEqual(game.pacing.fall_delay_ms, 650)

    def test_lock_spawns_next_piece(self):
        game = make_game(PieceKind.O, PieceKind.T, PieceKind.I)
        game.drop()
        game.update(1000)
        self.assertEqual(int(np.sum(game.grid.cells)), 4)
        self.assertEqual(game.grid.cell(5, 19), Cell.FILLED)
        self.assertEqual(game.piece.kind, PieceKind.T)
        self.assertEqual(game.next_piece.kind, PieceKind.I)
        self.assertEqual(game.position, Offset(5, 0))
        self.assertEqual(game.pacing.fall_delay_ms, 650)

    def test_lock_delay_defers_while_cooldown_active(self):
        game = make_game(PieceKind.O)
        game.drop()
        game.update(600)
        game.move_left()
        game.update(100)
        # Resting piece is still live: delay now tracks the cooldown
        self.assertEqual(int(np.sum(game.grid.cells)), 0)
        self.assertEqual(game.pacing.fall_delay_ms, 150)
        # Another slide renews the grace period
        self.assertTrue(game.move_left())
        self.assertEqual(game.position, Offset(3, 19))
        game.update(151)
        self.assertEqual(int(np.sum(game.grid.cells)), 0)
        self.assertEqual(game.pacing.fall_delay_ms, 99)
        game.update(100)
        self.assertEqual(int(np.sum(game.grid.cells)), 4)
        self.assertEqual(game.grid.cell(3, 19), Cell.FILLED)
        self.assertEqual(game.position, Offset(5, 0))

    def test_fall_interval_follows_level(self):
        game = make_game(PieceKind.T)
        self.assertEqual(game.fall_interval_ms(), 650)
        game.grid.level = 3
        self.assertEqual(game.fall_interval_ms(), 500)
        game.grid.level = 14
        self.assertEqual(game.fall_interval_ms(), -50)

    def test_completing_a_row_scores_one_hundred(self):
        game = make_game(PieceKind.I, PieceKind.T)
        for x in range(9):
            game.grid.fill(x, 19)
        for _ in range(4):
            self.assertTrue(game.move_right())
        game.drop()
        self.assertEqual(game.position, Offset(9, 18))
        game.update(1000)

        self.assertEqual(game.grid.score, 100)
        self.assertEqual(game.grid.lines, 1)
        # The I's upper three cells dropped into the bottom rows
        for y in (17, 18, 19):
            self.assertEqual(game.grid.cell(9, y), Cell.FILLED)
        self.assertEqual(int(np.sum(game.grid.cells)), 3)

    def test_landing_position_does_not_move_piece(self):
        game = make_game(PieceKind.J)
        landing = game.landing_position()
        self.assertEqual(game.position, Offset(5, 0))
        game.drop()
        self.assertEqual(game.position, landing)

    def test_state_overlay(self):
        game = make_game(PieceKind.I)
        state = game.get_state()
        # Cells above the top row are clipped
        self.assertEqual(int(np.sum(state == -int(PieceKind.I))), 2)
        self.assertEqual(int(np.sum(game.grid.cells)), 0)


class TestKeys(unittest.TestCase):

    def test_dispatch(self):
        game = make_game(PieceKind.T)
        self.assertTrue(game.on_key(37))
        self.assertEqual(game.position, Offset(4, 0))
        self.assertTrue(game.on_key(KeyCode.RIGHT))
        self.assertEqual(game.position, Offset(5, 0))
        self.assertTrue(game.on_key(40))
        self.assertEqual(game.position, Offset(5, 1))
        self.assertTrue(game.on_key(32))
        self.assertEqual(game.piece, Piece.spawn(PieceKind.T).rotated())
        self.assertTrue(game.on_key(38))
        self.assertFalse(game.move_down())

    def test_unknown_key_is_ignored(self):
        game = make_game(PieceKind.T)
        before = (game.position, game.piece, game.pacing.cooldown_ms)
        self.assertFalse(game.on_key(65))
        self.assertEqual((game.position, game.piece, game.pacing.cooldown_ms), before)


class TestGameOver(unittest.TestCase):

    def test_block_out_when_spawn_is_covered(self):
        game = make_game(PieceKind.O)
        for _ in range(5):
            game.move_left()
        game.drop()
        game.grid.fill(5, 0)
        game.update(1000)
        self.assertTrue(game.game_over)

        position = game.position
        self.assertFalse(game.move_left())
        self.assertFalse(game.move_down())
        self.assertFalse(game.rotate())
        game.update(1000)
        self.assertEqual(game.position, position)

        game.reset()
        self.assertFalse(game.game_over)
        self.assertEqual(int(np.sum(game.grid.cells)), 0)
        self.assertEqual(game.grid.score, 0)

    def test_lock_out_above_the_top(self):
        game = make_game(PieceKind.O)
        game.grid.fill(5, 1)
        self.assertEqual(game.drop(), 0)
        game.update(1000)
        self.assertTrue(game.game_over)
        # Nothing was stamped from the hidden rows
        self.assertEqual(int(np.sum(game.grid.cells)), 1)


if __name__ == '__main__':
    unittest.main()
