from __future__ import annotations

from collections import deque
from typing import Iterable, Optional, Set, Tuple

from models import Coordinate, RoomGrid, TileGrid
from passability import has_door, has_switch, is_goal, move_permitted

# (x, y, z, w) of the agent on the tile grid
AgentState = Tuple[int, int, int, int]


def room_neighbors(rooms: RoomGrid, c: Coordinate) -> Iterable[Coordinate]:
    """Rooms joined to c by an open passage, ignoring one-way direction."""
    size = rooms.size
    room = rooms.room(c)

    if room.passage_x.is_open and c.x + 1 < size.width:
        yield c._replace(x=c.x + 1)
    if c.x > 0 and rooms.room(c._replace(x=c.x - 1)).passage_x.is_open:
        yield c._replace(x=c.x - 1)

    if room.passage_y.is_open and c.y + 1 < size.height:
        yield c._replace(y=c.y + 1)
    if c.y > 0 and rooms.room(c._replace(y=c.y - 1)).passage_y.is_open:
        yield c._replace(y=c.y - 1)

    # a z (w) passage joins every layer of the cell
    if size.depth0 > 1 and rooms.room(c._replace(z=0)).passage_z.is_open:
        for z in range(size.depth0):
            if z != c.z:
                yield c._replace(z=z)
    if size.depth1 > 1 and rooms.room(c._replace(w=0)).passage_w.is_open:
        for w in range(size.depth1):
            if w != c.w:
                yield c._replace(w=w)


def reachable_rooms(rooms: RoomGrid, start: Optional[Coordinate] = None) -> Set[Coordinate]:
    """Every room connected to start over open passages."""
    if start is None:
        start = rooms.size.start
    q = deque([start])
    visited = {start}
    while q:
        c = q.popleft()
        for n in room_neighbors(rooms, c):
            if n not in visited:
                visited.add(n)
                q.append(n)
    return visited


class FieldReachabilityValidator:
    """Breadth-first search over agent states using the field's movement rules."""

    def agent_neighbors(self, grid: TileGrid, state: AgentState) -> Iterable[AgentState]:
        x, y, z, w = state
        for dx, dy in ((-1, 0), (1, 0), (0, 1), (0, -1)):
            if move_permitted(grid, (x, y), (x + dx, y + dy), z, w):
                yield x + dx, y + dy, z, w
        if has_switch(grid, x, y, w):
            yield x, y, (z + 1) % grid.size.depth0, w
        elif has_door(grid, x, y, z):
            yield x, y, z, (w + 1) % grid.size.depth1

    def reachable_states(self, grid: TileGrid) -> Set[AgentState]:
        sx, sy = grid.start_position
        s_state = (sx, sy, 0, 0)
        q = deque([s_state])
        visited = {s_state}
        while q:
            state = q.popleft()
            for n in self.agent_neighbors(grid, state):
                if n not in visited:
                    visited.add(n)
                    q.append(n)
        return visited

    def is_goal_reachable(self, grid: TileGrid) -> bool:
        return any(is_goal(grid, x, y) for x, y, _, _ in self.reachable_states(grid))
