"""Seeded train/test partition shared by every model specification."""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    """Fixed assignment of every row label to train or test.

    Attributes:
        train_index: Row labels of the training subset, in draw order.
        test_index: Row labels of the held-out subset, in draw order.
    """

    train_index: Tuple
    test_index: Tuple

    @property
    def n_train(self) -> int:
        return len(self.train_index)

    @property
    def n_test(self) -> int:
        return len(self.test_index)

    def split(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Return copies of the train and test rows of ``df``.

        Raises:
            KeyError: If ``df`` lacks any partition label.
        """
        return (
            df.loc[list(self.train_index)].copy(),
            df.loc[list(self.test_index)].copy(),
        )


def make_partition(
    df: pd.DataFrame,
    test_size: float = 0.25,
    random_state: int = 42,
) -> Partition:
    """Draw the train/test partition once with a seeded random sample.

    Args:
        df: Cleaned dataset; only its index is used.
        test_size: Fraction of rows held out. Defaults to 0.25.
        random_state: Seed; the same seed reproduces the same partition.

    Returns:
        Frozen :class:`Partition`.

    Raises:
        ValueError: If ``test_size`` is not strictly between 0 and 1.
    """
    if not 0.0 < test_size < 1.0:
        raise ValueError(f"test_size must be in (0, 1), got {test_size}.")

    train_idx, test_idx = train_test_split(
        np.asarray(df.index),
        test_size=test_size,
        random_state=random_state,
        shuffle=True,
    )
    partition = Partition(
        train_index=tuple(train_idx.tolist()),
        test_index=tuple(test_idx.tolist()),
    )
    logger.info(
        "Partition drawn (seed=%d): train=%d | test=%d",
        random_state,
        partition.n_train,
        partition.n_test,
    )
    return partition
