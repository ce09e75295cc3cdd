
import numpy as np
import pytest

from hdivfe.mesh import TriangleMesh
from hdivfe.functionspace import FESpace, FEVector, FEVectorBlock, HDivRT0, HDivBDM2


@pytest.fixture
def spaces():
    mesh = TriangleMesh.from_box(nx=2, ny=2)
    return FESpace(mesh, HDivRT0(2)), FESpace(mesh, HDivBDM2())


class TestFEVector:
    def test_partition(self, spaces):
        vec = FEVector(list(spaces) + [spaces[0]])
        assert len(vec) == 3
        assert vec.ndofs == sum(space.ndofs for space in vec.spaces())
        last = 0
        for block in vec:
            assert block.offset == last
            assert len(block) == block.space.ndofs
            last = block.last_index
        assert last == len(vec.entries)
        assert [block.name for block in vec] == ["#1", "#2", "#3"]
        assert vec[1].first == spaces[0].ndofs
        assert vec[1].last == spaces[0].ndofs + spaces[1].ndofs - 1

    def test_single_space(self, spaces):
        vec = FEVector(spaces[1], name='u')
        assert len(vec) == 1
        assert vec.name == 'u'
        assert vec[0].ncomponents == 2

    def test_tags(self, spaces):
        vec = FEVector(spaces, tags=['sigma', 'u'])
        assert vec['u'] is vec[1]
        assert vec.index('sigma') == 0
        assert vec['u'].name == 'u'
        with pytest.raises(KeyError):
            vec['p']
        with pytest.raises(ValueError):
            FEVector(spaces, tags=['sigma'])

    def test_integer_tags(self, spaces):
        vec = FEVector(spaces, tags=[10, 20])
        assert vec[20] is vec.blocks[1]
        assert vec[np.int64(10)] is vec.blocks[0]
        assert vec[20].name == '20'
        # integers that are not tags select by position
        assert vec[1] is vec.blocks[1]
        with pytest.raises(KeyError):
            vec['10']

        vec = FEVector(spaces, tags=[1, 0])
        assert vec[0] is vec.blocks[1]
        assert vec[1] is vec.blocks[0]

    def test_entries(self, spaces):
        ndofs = spaces[0].ndofs + spaces[1].ndofs
        entries = np.arange(ndofs, dtype=np.float64)
        vec = FEVector(spaces, entries=entries)
        assert vec.entries is entries
        np.testing.assert_array_equal(vec[1][:3], entries[spaces[0].ndofs:][:3])
        with pytest.raises(ValueError):
            FEVector(spaces, entries=np.zeros(ndofs - 1))

    def test_block_views_share_buffer(self, spaces):
        vec = FEVector(spaces)
        b0, b1 = vec[0], vec[1]
        b1[0] = 3.0
        b1[[1, 2]] = [4.0, 5.0]
        b1[-2:] = 7.0
        assert vec.entries[b1.offset] == 3.0
        np.testing.assert_array_equal(vec.entries[b1.offset+1:b1.offset+3], [4.0, 5.0])
        np.testing.assert_array_equal(vec.entries[-2:], 7.0)
        np.testing.assert_array_equal(b0.view(), 0.0)
        b0.view()[:] = 1.0
        assert np.sum(vec.entries[:len(b0)]) == len(b0)
        np.testing.assert_array_equal(np.asarray(b0), 1.0)

    def test_block_bounds(self, spaces):
        vec = FEVector(spaces)
        b0 = vec[0]
        n = len(b0)
        with pytest.raises(IndexError):
            b0[n]
        with pytest.raises(IndexError):
            b0[-1]
        with pytest.raises(IndexError):
            b0[[0, n]] = 1.0
        # slices are confined to the block
        assert len(b0[n-2:n+5]) == 2
        np.testing.assert_array_equal(vec[1].view(), 0.0)

    def test_fill_add_dot(self, spaces):
        vec = FEVector([spaces[0], spaces[0], spaces[1]])
        b0, b1, b2 = vec
        b0.fill(2.0)
        b1.fill(1.0)
        b1.add(b0, factor=0.5)
        np.testing.assert_array_equal(b1.view(), 2.0)
        assert b0.dot(b1) == pytest.approx(4.0*len(b0))
        b2.add(vec.entries, factor=-1.0, offset=0)
        np.testing.assert_array_equal(b2[:len(b0)], -2.0)
        with pytest.raises(ValueError):
            b0.add(b2)
        with pytest.raises(ValueError):
            b2.add(vec.entries, offset=len(vec.entries) - 3)
        with pytest.raises(ValueError):
            b0.dot(np.ones(len(b0) + 1))

    def test_norms(self, spaces):
        vec = FEVector(spaces)
        vec[0].fill(1.0)
        vec[1][0] = -3.0
        n0 = len(vec[0])
        np.testing.assert_allclose(vec.norms(), [np.sqrt(n0), 3.0])
        np.testing.assert_allclose(vec.norm(), np.sqrt(n0 + 9.0))
        np.testing.assert_allclose(vec.norms(p=np.inf), [1.0, 3.0])
        assert vec[1].norm(p=1) == pytest.approx(3.0)

    def test_append(self, spaces):
        vec = FEVector(spaces[0], tags=['sigma'])
        b0 = vec[0]
        b0.fill(1.0)
        n = vec.append(spaces[1], tag='u')
        assert n == 2
        assert vec[0] is b0
        assert vec['u'].offset == spaces[0].ndofs
        assert len(vec.entries) == spaces[0].ndofs + spaces[1].ndofs
        np.testing.assert_array_equal(b0.view(), 1.0)
        # old blocks see the new buffer
        b0[0] = 5.0
        assert vec.entries[0] == 5.0
        with pytest.raises(ValueError):
            vec.append(spaces[1])

    def test_append_untagged(self, spaces):
        vec = FEVector(spaces[0])
        vec.append(spaces[1], name='velocity')
        assert vec[1].name == 'velocity'
        with pytest.raises(ValueError):
            vec.append(spaces[1], tag='p')

    def test_copy(self, spaces):
        vec = FEVector(spaces, name='x', tags=['a', 'b'])
        vec['b'].fill(1.0)
        other = vec.copy()
        other['b'].fill(2.0)
        np.testing.assert_array_equal(vec['b'].view(), 1.0)
        assert other.name == 'x'
        assert other.tags == ['a', 'b']
        assert other[0].space is spaces[0]

    def test_str(self, spaces):
        vec = FEVector(spaces, tags=['sigma', 'u'])
        s = str(vec)
        assert 'sigma' in s and 'HDivBDM2{2}' in s
        assert isinstance(vec[0], FEVectorBlock)
        assert 'sigma' in repr(vec[0])
