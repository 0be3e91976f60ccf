"""
Unit Tests - Edit Overlay
"""
import pytest

from goaltracker.engine import EditBuffer, FieldOverlay


class TestFieldOverlay:
    """Tests for FieldOverlay"""

    def test_pending_edit_wins(self):
        """Test readers see the pending edit over the server value"""
        overlay = FieldOverlay(server_value=10.0)
        overlay.edit(12.5)

        assert overlay.value == 12.5
        assert overlay.is_dirty

    def test_discard(self):
        """Test discarding restores the server value"""
        overlay = FieldOverlay(server_value=10.0)
        overlay.edit(12.5)
        overlay.discard()

        assert overlay.value == 10.0
        assert not overlay.is_dirty

    def test_zero_is_a_real_edit(self):
        """Test an edit to zero is not mistaken for no edit"""
        overlay = FieldOverlay(server_value=10.0)
        overlay.edit(0.0)

        assert overlay.value == 0.0
        assert overlay.is_dirty


class TestEditBuffer:
    """Tests for EditBuffer"""

    def test_merged_view(self):
        """Test merged values combine server values and edits"""
        buffer = EditBuffer({9: 10.0, 10: 15.0})
        buffer.edit(10, 20.0)
        buffer.edit(11, 5.0)

        assert buffer.merged() == {9: 10.0, 10: 20.0, 11: 5.0}
        assert buffer.pending() == {10: 20.0, 11: 5.0}
        assert buffer.has_pending

    def test_refresh_keeps_pending_edits(self):
        """Test a server refresh never drops unsaved edits"""
        buffer = EditBuffer({9: 10.0, 10: 15.0})
        buffer.edit(10, 20.0)

        buffer.refresh({9: 11.0, 10: 16.0})

        assert buffer.value(9) == 11.0
        assert buffer.value(10) == 20.0

    def test_refresh_drops_removed_server_values(self):
        """Test keys gone from the server read as missing unless edited"""
        buffer = EditBuffer({9: 10.0, 10: 15.0})
        buffer.refresh({9: 10.0})

        assert buffer.value(10) is None
        assert buffer.value(10, 0.0) == 0.0
        assert buffer.merged() == {9: 10.0}

    def test_discard_one_or_all(self):
        """Test discarding a single key and then everything"""
        buffer = EditBuffer({9: 10.0})
        buffer.edit(9, 1.0)
        buffer.edit(10, 2.0)

        buffer.discard(9)
        assert buffer.pending() == {10: 2.0}

        buffer.discard()
        assert not buffer.has_pending

    async def test_commit_clears_edits_after_save(self):
        """Test a successful save promotes edits to server values"""
        buffer = EditBuffer({9: 10.0})
        buffer.edit(9, 12.0)
        saved = []

        async def save(values):
            saved.append(values)

        payload = await buffer.commit(save)

        assert payload == {9: 12.0}
        assert saved == [{9: 12.0}]
        assert not buffer.has_pending
        assert buffer.value(9) == 12.0

    async def test_commit_failure_keeps_edits(self):
        """Test a failed save leaves every pending edit in place"""
        buffer = EditBuffer({9: 10.0})
        buffer.edit(9, 12.0)

        async def save(values):
            raise RuntimeError("network down")

        with pytest.raises(RuntimeError):
            await buffer.commit(save)

        assert buffer.pending() == {9: 12.0}
        assert buffer.value(9) == 12.0
