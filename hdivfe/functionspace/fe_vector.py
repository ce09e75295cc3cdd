
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ..typing import TensorLike
from .. import logger


class FEVectorBlock():
    """One block of an `FEVector`: the dofs of one space.

    A block owns no data. It remembers its position `[first, last)` in the
    buffer of its parent vector, so writes through the block are seen by the
    parent and by every other view of the buffer. Local indices are relative
    to the block and must lie in `[0, len(block))`.

    Attributes:
        name (str): the name of the block.
        space (FESpace): the space of the dofs.
        offset (int): position of the first dof in the parent buffer.
        last_index (int): position one past the last dof.
        parent (FEVector): the vector holding the buffer.
    """
    def __init__(self, name: str, space, offset: int, last_index: int, parent) -> None:
        self.name = name
        self.space = space
        self.offset = offset
        self.last_index = last_index
        self.parent = parent

    @property
    def entries(self) -> TensorLike:
        """The whole buffer of the parent vector."""
        return self.parent.entries

    @property
    def first(self) -> int:
        return self.offset

    @property
    def last(self) -> int:
        return self.last_index - 1

    @property
    def ncomponents(self) -> int:
        return self.space.ncomponents

    def __len__(self) -> int:
        return self.last_index - self.offset

    def __repr__(self) -> str:
        return (f"FEVectorBlock({self.name!r}, space={self.space.name}, "
                f"range=[{self.offset}, {self.last_index}))")

    def view(self) -> TensorLike:
        """A numpy view on the dofs of the block."""
        return self.parent.entries[self.offset:self.last_index]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.view()
        return self.view().astype(dtype)

    def _check_index(self, i):
        if isinstance(i, (int, np.integer)):
            if not (0 <= i < len(self)):
                raise IndexError(f"index {i} is out of range for block "
                                 f"{self.name!r} of length {len(self)}.")
        elif isinstance(i, slice):
            pass
        else:
            i = np.asarray(i)
            if i.dtype != np.bool_ and i.size > 0:
                if i.min() < 0 or i.max() >= len(self):
                    raise IndexError(f"indices out of range for block "
                                     f"{self.name!r} of length {len(self)}.")
        return i

    def __getitem__(self, i):
        return self.view()[self._check_index(i)]

    def __setitem__(self, i, value) -> None:
        self.view()[self._check_index(i)] = value

    def fill(self, value: float) -> None:
        self.view().fill(value)

    def add(self, b: Union['FEVectorBlock', TensorLike], factor: float=1.0,
            offset: int=0) -> None:
        """Add `factor*b` to the block.

        Parameters:
            b (FEVectorBlock | Tensor): a block of the same length, or an array
                whose entries `b[offset:offset+len(self)]` are added.
            factor (float): scaling of `b`.
            offset (int): start position in the raw array `b`.
        """
        if isinstance(b, FEVectorBlock):
            if len(b) != len(self):
                raise ValueError(f"cannot add block {b.name!r} of length {len(b)} "
                                 f"to block {self.name!r} of length {len(self)}.")
            src = b.view()
        else:
            b = np.asarray(b)
            if offset < 0 or b.shape[0] - offset < len(self):
                raise ValueError(f"array of length {b.shape[0]} with offset "
                                 f"{offset} is too short for block {self.name!r} "
                                 f"of length {len(self)}.")
            src = b[offset:offset + len(self)]
        self.view()[:] += factor*src

    def dot(self, b: Union['FEVectorBlock', TensorLike]) -> float:
        other = b.view() if isinstance(b, FEVectorBlock) else np.asarray(b)
        if other.shape[0] != len(self):
            raise ValueError(f"cannot take the dot product of block {self.name!r} "
                             f"of length {len(self)} with length {other.shape[0]}.")
        return np.dot(self.view(), other)

    def norm(self, p: float=2) -> float:
        return np.linalg.norm(self.view(), ord=p)


class FEVector():
    """A dof vector made of consecutive blocks, one per space.

    All blocks share one contiguous buffer `entries`; block `j` occupies the
    dofs of `spaces[j]` right after block `j-1`.

    Parameters:
        spaces (FESpace | Sequence[FESpace]): the spaces of the blocks.
        name (str, optional): name of the vector.
        tags (Sequence, optional): one tag per block; blocks can be looked up
            by tag, and are named after their tags.
        entries (Tensor, optional): buffer of total length, used without copy
            when its dtype matches.
        dtype: dtype of a new buffer.

    Raises:
        ValueError: if the tags or the buffer do not fit the spaces.
    """
    def __init__(self, spaces, name: Optional[str]=None,
                 tags: Optional[Sequence[Any]]=None,
                 entries: Optional[TensorLike]=None, dtype=np.float64) -> None:
        if not isinstance(spaces, (list, tuple)):
            spaces = [spaces]
        spaces = list(spaces)
        if tags is not None:
            tags = list(tags)
            if len(tags) != len(spaces):
                raise ValueError(f"got {len(tags)} tags for {len(spaces)} spaces.")
        else:
            tags = []

        ndofs = sum(space.ndofs for space in spaces)
        if entries is None:
            entries = np.zeros(ndofs, dtype=dtype)
        else:
            entries = np.asarray(entries, dtype=dtype)
            if entries.shape != (ndofs, ):
                raise ValueError(f"entries of shape {entries.shape} do not match "
                                 f"the {ndofs} dofs of the spaces.")

        self.name = "" if name is None else name
        self.entries = entries
        self.tags = tags
        self.blocks: List[FEVectorBlock] = []
        offset = 0
        for j, space in enumerate(spaces):
            bname = str(tags[j]) if tags else f"#{j+1}"
            last = offset + space.ndofs
            self.blocks.append(FEVectorBlock(bname, space, offset, last, self))
            offset = last
        logger.debug(f"FEVector {self.name!r} with {len(self.blocks)} blocks "
                     f"and {ndofs} entries.")

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def index(self, tag) -> int:
        """Position of the block with the given tag."""
        try:
            return self.tags.index(tag)
        except ValueError:
            raise KeyError(f"FEVector {self.name!r} has no block with tag {tag!r}.") from None

    def __getitem__(self, i) -> FEVectorBlock:
        """Block with tag `i`, or at position `i` when no block has that tag.

        Tags are looked up first, so in a vector tagged with integers an
        integer selects by tag whenever it is one of the tags.
        """
        if i in self.tags:
            return self.blocks[self.tags.index(i)]
        if isinstance(i, (int, np.integer)):
            return self.blocks[i]
        return self.blocks[self.index(i)]

    def spaces(self) -> list:
        return [block.space for block in self.blocks]

    @property
    def ndofs(self) -> int:
        return self.entries.shape[0]

    def append(self, space, name: str='', tag: Optional[Any]=None) -> int:
        """Add a block for `space` at the end and grow the buffer.

        The buffer is reallocated, numpy views taken from blocks before the
        call do not see later writes.

        Returns:
            int: the new number of blocks.
        """
        if self.tags and tag is None:
            raise ValueError(f"FEVector {self.name!r} is tagged, the new block "
                             "needs a tag.")
        if tag is not None and not self.tags and self.blocks:
            raise ValueError(f"FEVector {self.name!r} is untagged, the new "
                             "block cannot have a tag.")
        offset = self.entries.shape[0]
        last = offset + space.ndofs
        self.entries = np.concatenate(
            [self.entries, np.zeros(space.ndofs, dtype=self.entries.dtype)])
        if tag is not None:
            self.tags.append(tag)
            if name == '':
                name = str(tag)
        if name == '':
            name = f"#{len(self.blocks)+1}"
        self.blocks.append(FEVectorBlock(name, space, offset, last, self))
        return len(self.blocks)

    def fill(self, value: float) -> None:
        self.entries.fill(value)

    def norm(self, p: float=2) -> float:
        return np.linalg.norm(self.entries, ord=p)

    def norms(self, p: float=2) -> TensorLike:
        return np.array([block.norm(p) for block in self.blocks])

    def copy(self) -> 'FEVector':
        tags = list(self.tags) if self.tags else None
        vec = FEVector(self.spaces(), name=self.name, tags=tags,
                       entries=self.entries.copy(), dtype=self.entries.dtype)
        for block, other in zip(vec.blocks, self.blocks):
            block.name = other.name
        return vec

    def __str__(self) -> str:
        lines = ["FEVector information",
                 "    block  |  ndofs \t|  min  /  max  \t| FEType \t\t (name/tag)"]
        for j, block in enumerate(self.blocks):
            v = block.view()
            vmin, vmax = (v.min(), v.max()) if len(block) > 0 else (0.0, 0.0)
            lines.append(f"    [{j:>5}]  |  {len(block):>5} \t| {vmin:.2e}/{vmax:.2e}  \t"
                         f"| {block.space.name} \t ({block.name})")
        return "\n".join(lines)
