import json
import unittest

from gamebook import (
    BoardPlacement,
    Card,
    GridCell,
    GridRect,
    card_to_json,
    commit_move_strict_no_overlap,
    decode_stored_cards,
    find_best_insertion,
    get_axis_intent_span,
    get_drop_target_conflict_cells,
    pack,
)


def seed_board():
    cards = [Card(id=t, title=t, ticket_type=t) for t in ('polaroid', 'postcard', 'widget', 'ticket', 'minimal')]
    return pack(cards, 4)


def drag_board():
    return [
        Card(id='dragged', title='D', ticket_type='ticket', board=BoardPlacement(0, 0, 2, 1, 4)),
        Card(id='a', title='A', ticket_type='minimal', board=BoardPlacement(2, 0, 1, 1, 4)),
        Card(id='b', title='B', ticket_type='minimal', board=BoardPlacement(3, 0, 1, 1, 4)),
    ]


class TestGameBoard(unittest.TestCase):
    def test_one_card_per_type_packs_without_overlap(self):
        board = seed_board()
        cells = set()
        for card in board:
            for cell in card.board.rect().cells():
                self.assertNotIn(cell, cells)
                cells.add(cell)
        widths = {c.id: c.board.w for c in board}
        heights = {c.id: c.board.h for c in board}
        self.assertEqual(widths['postcard'], 2)
        self.assertEqual(widths['ticket'], 2)
        self.assertEqual(heights['polaroid'], 2)
        self.assertEqual((widths['minimal'], heights['minimal']), (1, 1))
        self.assertEqual(len({(c.board.x, c.board.y) for c in board}), 5)

    def test_best_insertion_towards_origin_is_index_zero(self):
        board = seed_board()
        for card in board:
            res = find_best_insertion(board, card.id, 0, 0, 4)
            self.assertEqual(res.insertion_index, 0)
            self.assertEqual((res.target.x, res.target.y), (0, 0))

    def test_conflict_cells_for_wide_card_dragged_right(self):
        cells = get_drop_target_conflict_cells(drag_board(), 'dragged', GridRect(1, 0, 2, 1), 4)
        self.assertEqual(cells, [GridCell(2, 0)])

    def test_strict_commit_moves_or_leaves_board_alone(self):
        cards = drag_board()
        moved = commit_move_strict_no_overlap(cards, 'dragged', GridRect(0, 1, 2, 1), 4)
        self.assertEqual(moved[0].board, BoardPlacement(0, 1, 2, 1, 4))
        self.assertEqual(moved[1:], cards[1:])

        self.assertIs(commit_move_strict_no_overlap(cards, 'dragged', GridRect(1, 0, 2, 1), 4), cards)
        self.assertEqual([c.board for c in cards], [c.board for c in drag_board()])

    def test_axis_intent_examples(self):
        self.assertEqual(get_axis_intent_span(0, 100, 4), 4)
        # 0.49 of a stride from the nearest line is past every threshold
        self.assertEqual(get_axis_intent_span(151, 100, 4), 1)
        self.assertEqual(get_axis_intent_span(101.5001, 100, 4), 3)
        self.assertEqual(get_axis_intent_span(10, 0, 4), 1)

    def test_non_finite_coordinate_rejects_whole_collection(self):
        games = [card_to_json(c) for c in seed_board()]
        games[3]['board']['y'] = float('inf')
        self.assertIsNone(decode_stored_cards(json.dumps(games)))
        games[3]['board']['y'] = 1
        self.assertEqual(len(decode_stored_cards(json.dumps(games))), 5)


if __name__ == '__main__':
    unittest.main()
