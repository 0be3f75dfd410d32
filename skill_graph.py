from collections import deque

# skill_graph.py

# Traversal helpers over an adjacency list representation of the skill graph.
# The key is a skill id (a node).
# The value is a list of the skill ids its edges lead to, in discovery order.
# Every helper keeps a visited set, so cycles and self-loops always terminate.


# Function to find BFS of Graph from a given source s
def bfs(adj, s):
    # create a set to store visited nodes
    visited = set()

    # create a queue for BFS
    q = deque()

    # Mark source node as visited and enqueue it
    visited.add(s)
    q.append(s)

    # The result list to store the traversal order
    res = []

    # Iterate over the queue
    while q:
        # Dequeue a vertex from queue and add it to the result
        curr = q.popleft()
        res.append(curr)

        for neighbour in adj.get(curr, []):  # Use .get() for safety
            if neighbour not in visited:
                visited.add(neighbour)
                q.append(neighbour)

    return res


def bfs_shortest_path(adj, source, target):
    """
    Breadth-first search from source to target.

    Returns the ids on the path excluding the source and including the target,
    or an empty list when the target is unreachable or source == target.
    """
    if source == target:
        return []

    # parent pointers double as the visited set
    parents = {source: None}
    q = deque([source])

    while q:
        curr = q.popleft()
        for neighbour in adj.get(curr, []):
            if neighbour in parents:
                continue
            parents[neighbour] = curr
            if neighbour == target:
                path = [target]
                step = curr
                while step != source:
                    path.append(step)
                    step = parents[step]
                path.reverse()
                return path
            q.append(neighbour)

    return []


def dfs_iterative(adj, start_node):
    visited = set()
    stack = [start_node]
    res = []

    while stack:
        # Pop a vertex from the top of the stack
        curr = stack.pop()

        if curr not in visited:
            res.append(curr)
            visited.add(curr)

            # Push in reverse so neighbours are visited in list order
            for neighbour in reversed(adj.get(curr, [])):
                if neighbour not in visited:
                    stack.append(neighbour)
    return res


def nodes_within_steps(adj, start_node, max_steps):
    """Nodes at most max_steps hops away from start_node, excluding it."""
    visited = {start_node}
    q = deque([(start_node, 0)])
    res = []

    while q:
        curr, steps = q.popleft()
        if steps == max_steps:
            continue
        for neighbour in adj.get(curr, []):
            if neighbour not in visited:
                visited.add(neighbour)
                res.append(neighbour)
                q.append((neighbour, steps + 1))

    return res


def one_hop_frontier(adj, mastered):
    """
    Ids with an edge from a mastered id that are not mastered themselves,
    in order of first discovery.
    """
    mastered_set = set(mastered)
    seen = set()
    res = []

    for skill_id in mastered:
        for neighbour in adj.get(skill_id, []):
            if neighbour in mastered_set or neighbour in seen:
                continue
            seen.add(neighbour)
            res.append(neighbour)

    return res


if __name__ == "__main__":
    sample_graph = {
        "Coordinate Limbs": ["Crawl", "Grasp Small Object"],
        "Crawl": ["Walk"],
        "See Objects": ["Grasp Small Object", "ID Fork"],
        "Grasp Small Object": ["Place Objects"],
        "ID Fork": ["Place Objects"],
        "Walk": ["Place Objects"],
        "Place Objects": ["Set Table"],
    }

    start_node = "Coordinate Limbs"
    print(f"Skills unlocked from '{start_node}' via BFS:")
    print(" -> ".join(bfs(sample_graph, start_node)))

    print("\n--- Shortest path to 'Set Table' ---")
    print(" -> ".join(bfs_shortest_path(sample_graph, start_node, "Set Table")))
