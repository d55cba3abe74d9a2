"""
Tests for whole-batch validation and batch splitting.
"""
from dknn.batch import INVALID_BATCH_NOTICE, split_batches, validate_batch
from dknn.points import DataPoint


def _batch(n=5, label=0):
    return [DataPoint(float(i), float(i), label) for i in range(n)]


def test_validate_batch_accepts_complete_batch(capsys):
    """Test a complete batch is accepted silently."""
    assert validate_batch(_batch(), batch_size=5) is False
    assert capsys.readouterr().out == ""


def test_validate_batch_rejects_missing_entry(capsys):
    """Test one missing entry rejects the whole batch with a notice."""
    batch = _batch()
    batch[2] = None
    assert validate_batch(batch) is True
    assert INVALID_BATCH_NOTICE in capsys.readouterr().out


def test_validate_batch_rejects_none_batch():
    """Test a missing batch is rejected."""
    assert validate_batch(None, notify=None) is True


def test_validate_batch_rejects_wrong_size():
    """Test a batch shorter than batch_size is rejected."""
    assert validate_batch(_batch(4), batch_size=5, notify=None) is True


def test_validate_batch_rejects_unusable_entries():
    """Test non-finite coordinates, foreign objects and missing labels."""
    assert validate_batch(_batch() + [DataPoint(float("nan"), 0.0, 0)], notify=None) is True
    assert validate_batch(_batch() + [(1.0, 2.0, 0)], notify=None) is True
    assert validate_batch(_batch() + [DataPoint(1.0, 2.0)], notify=None) is True


def test_validate_batch_unlabeled_allowed_when_not_required():
    """Test unlabeled points pass when labels are not required."""
    batch = [DataPoint(1.0, 2.0), DataPoint(3.0, 4.0)]
    assert validate_batch(batch, require_labels=False, notify=None) is False


def test_validate_batch_out_of_range_label_is_not_invalid():
    """Test labels outside the class range do not reject the batch."""
    assert validate_batch(_batch(label=99), notify=None) is False


def test_validate_batch_custom_notify():
    """Test the notice goes to the supplied callback."""
    notices = []
    validate_batch([None], notify=notices.append)
    assert notices == [INVALID_BATCH_NOTICE]


def test_split_batches_pads_trailing_batch():
    """Test the short trailing batch is padded so it gets rejected."""
    batches = list(split_batches(_batch(7), 3))
    assert [len(b) for b in batches] == [3, 3, 3]
    assert batches[2][1:] == [None, None]
    assert validate_batch(batches[0], 3, notify=None) is False
    assert validate_batch(batches[2], 3, notify=None) is True


def test_split_batches_exact_multiple():
    """Test no padding batch is produced for an exact multiple."""
    batches = list(split_batches(_batch(6), 3))
    assert len(batches) == 2
    assert all(p is not None for b in batches for p in b)
