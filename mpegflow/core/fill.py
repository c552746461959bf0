"""Gap filling for fine (8x8) grids."""

from .frame import EMPTY_CELL, FILLED_CELL, RasterizedFrame, trunc_half

FINE_GRID_STEP = 8
DEFAULT_PASSES = 2


def fill_gaps(frame: RasterizedFrame, passes: int = DEFAULT_PASSES) -> int:
    """Fill unoccupied interior cells from their immediate neighbors.

    Cells are visited in raster order. An empty cell whose left and right
    neighbors are both occupied gets their truncated mean; failing that,
    the same is tried with the cells above and below. Filled cells are
    marked 2 and count as occupied for every later visit, including later
    cells of the same pass. The outermost rows and columns are never
    filled.

    Args:
        frame: frame to modify in place
        passes: number of sweeps over the grid

    Returns:
        number of cells filled
    """
    rows, cols = frame.shape
    if rows < 3 or cols < 3:
        return 0

    # Visited cell by cell in raster order
    dx = frame.dx.tolist()
    dy = frame.dy.tolist()
    occ = frame.occupancy.tolist()

    filled = 0
    for _ in range(passes):
        for i in range(1, rows - 1):
            row_dx, row_dy, row_occ = dx[i], dy[i], occ[i]
            up_occ, down_occ = occ[i - 1], occ[i + 1]
            for j in range(1, cols - 1):
                if row_occ[j] != EMPTY_CELL:
                    continue
                if row_occ[j - 1] != EMPTY_CELL and row_occ[j + 1] != EMPTY_CELL:
                    row_dx[j] = trunc_half(row_dx[j - 1] + row_dx[j + 1])
                    row_dy[j] = trunc_half(row_dy[j - 1] + row_dy[j + 1])
                elif up_occ[j] != EMPTY_CELL and down_occ[j] != EMPTY_CELL:
                    row_dx[j] = trunc_half(dx[i - 1][j] + dx[i + 1][j])
                    row_dy[j] = trunc_half(dy[i - 1][j] + dy[i + 1][j])
                else:
                    continue
                row_occ[j] = FILLED_CELL
                filled += 1

    if filled:
        frame.dx[:] = dx
        frame.dy[:] = dy
        frame.occupancy[:] = occ
    return filled


def maybe_fill_gaps(frame: RasterizedFrame, passes: int = DEFAULT_PASSES) -> int:
    """Run gap filling only on fine grids; coarse grids are left untouched."""
    if frame.grid_step != FINE_GRID_STEP:
        return 0
    return fill_gaps(frame, passes)
