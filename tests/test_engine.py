import unittest

from gamebook import (
    BoardPlacement,
    Card,
    GridCell,
    GridRect,
    Span,
    commit_move_strict_no_overlap,
    drag_conflict_scope,
    get_drop_target_conflict_cells,
    normalize_placement,
)


def card(card_id, ticket_type, x, y, w, h, columns=4):
    return Card(id=card_id, title=card_id, ticket_type=ticket_type, board=BoardPlacement(x, y, w, h, columns))


def base_cards():
    return [
        card('dragged', 'ticket', 0, 0, 2, 1),
        card('cell', 'minimal', 2, 0, 1, 1),
        card('tail', 'minimal', 3, 0, 1, 1),
    ]


class TestDropConflicts(unittest.TestCase):
    def test_given_target_over_neighbour_when_checked_then_conflicting_cell_reported(self):
        cells = get_drop_target_conflict_cells(base_cards(), 'dragged', GridRect(1, 0, 2, 1), 4)
        self.assertEqual(cells, [GridCell(2, 0)])

    def test_given_free_target_when_checked_then_no_conflicts(self):
        self.assertEqual(get_drop_target_conflict_cells(base_cards(), 'dragged', GridRect(0, 1, 2, 1), 4), [])

    def test_given_own_cells_when_checked_then_not_a_conflict(self):
        self.assertEqual(get_drop_target_conflict_cells(base_cards(), 'dragged', GridRect(0, 0, 2, 1), 4), [])

    def test_given_blocker_on_lower_row_when_checked_then_reported(self):
        cards = [card('dragged', 'minimal', 0, 0, 1, 1), card('blocker', 'minimal', 1, 4, 1, 1)]
        cells = get_drop_target_conflict_cells(cards, 'dragged', GridRect(1, 4, 1, 1), 4)
        self.assertEqual(cells, [GridCell(1, 4)])

    def test_given_target_past_right_edge_when_checked_then_clamped_before_checking(self):
        cells = get_drop_target_conflict_cells(base_cards(), 'dragged', GridRect(5, 0, 2, 1), 4)
        self.assertEqual(cells, [GridCell(2, 0), GridCell(3, 0)])

    def test_given_target_size_when_checked_then_resolved_for_ticket_type(self):
        # a ticket cannot shrink to one cell, so (1,1,1,1) becomes (1,1,2,1)
        cards = base_cards() + [card('below', 'minimal', 2, 1, 1, 1)]
        cells = get_drop_target_conflict_cells(cards, 'dragged', GridRect(1, 1, 1, 1), 4)
        self.assertEqual(cells, [GridCell(2, 1)])

    def test_given_unknown_card_when_checked_then_empty(self):
        self.assertEqual(get_drop_target_conflict_cells(base_cards(), 'missing', GridRect(2, 0, 1, 1), 4), [])


class TestCommitMove(unittest.TestCase):
    def test_given_free_target_when_committed_then_only_moved_card_changes(self):
        cards = base_cards()
        out = commit_move_strict_no_overlap(cards, 'dragged', GridRect(0, 1, 2, 1), 4)
        self.assertIsNot(out, cards)
        self.assertEqual(out[0].board, BoardPlacement(0, 1, 2, 1, 4))
        self.assertIs(out[1], cards[1])
        self.assertIs(out[2], cards[2])
        self.assertEqual([c.id for c in out], ['dragged', 'cell', 'tail'])

    def test_given_conflicting_target_when_committed_then_same_collection_returned(self):
        cards = base_cards()
        self.assertIs(commit_move_strict_no_overlap(cards, 'dragged', GridRect(1, 0, 2, 1), 4), cards)

    def test_given_current_placement_when_committed_then_noop_returns_same_collection(self):
        cards = base_cards()
        self.assertIs(commit_move_strict_no_overlap(cards, 'dragged', GridRect(0, 0, 2, 1), 4), cards)

    def test_given_unknown_card_when_committed_then_same_collection_returned(self):
        cards = base_cards()
        self.assertIs(commit_move_strict_no_overlap(cards, 'missing', GridRect(0, 3, 1, 1), 4), cards)

    def test_given_unplaced_card_at_origin_when_committed_then_noop(self):
        cards = [Card(id='solo', title='Solo', ticket_type='minimal')]
        self.assertIs(commit_move_strict_no_overlap(cards, 'solo', GridRect(0, 0, 1, 1), 4), cards)

    def test_given_resize_into_free_cells_when_committed_then_new_span_kept(self):
        cards = [card('w', 'widget', 0, 0, 1, 1), card('other', 'minimal', 3, 3, 1, 1)]
        out = commit_move_strict_no_overlap(cards, 'w', GridRect(0, 0, 2, 2), 4)
        self.assertEqual(out[0].board, BoardPlacement(0, 0, 2, 2, 4))

    def test_given_successful_commit_when_rechecked_then_board_has_no_overlap(self):
        out = commit_move_strict_no_overlap(base_cards(), 'cell', GridRect(1, 2, 1, 1), 4)
        seen = set()
        for c in out:
            for cell in normalize_placement(c, 4).rect().cells():
                self.assertNotIn(cell, seen)
                seen.add(cell)


class TestDragConflictScope(unittest.TestCase):
    def test_given_card_on_page_when_scoped_then_page_unchanged(self):
        page = base_cards()
        self.assertIs(drag_conflict_scope(page, page[0], Span(2, 1), 4), page)

    def test_given_card_from_other_page_when_scoped_then_stand_in_appended_at_origin(self):
        page = base_cards()[1:]
        visitor = card('visitor', 'postcard', 1, 6, 2, 1)
        scoped = drag_conflict_scope(page, visitor, Span(2, 1), 4)
        self.assertEqual([c.id for c in scoped], ['cell', 'tail', 'visitor'])
        self.assertEqual(scoped[-1].board, BoardPlacement(0, 0, 2, 1, 4))
        self.assertEqual(len(page), 2)

    def test_given_scoped_page_when_checking_drop_then_visitor_conflicts_seen(self):
        page = base_cards()[1:]
        visitor = Card(id='visitor', title='V', ticket_type='postcard')
        scoped = drag_conflict_scope(page, visitor, Span(2, 1), 4)
        cells = get_drop_target_conflict_cells(scoped, 'visitor', GridRect(2, 0, 2, 1), 4)
        self.assertEqual(cells, [GridCell(2, 0), GridCell(3, 0)])


if __name__ == '__main__':
    unittest.main()
