from typing import Dict, Iterable, List, Set
import networkx as nx

from .models import Course


def build_clash_graph(courses: Iterable[Course]) -> nx.Graph:
    """Courses as nodes, an edge wherever two courses share a student.

    Edge attribute ``weight`` is the number of shared students.
    """
    G = nx.Graph()
    enrolled: Dict[str, Set[str]] = {}
    for course in courses:
        G.add_node(course.id, label=course.label)
        for sid in course.student_ids():
            enrolled.setdefault(sid, set()).add(course.id)
    for course_ids in enrolled.values():
        ids: List[str] = sorted(course_ids)
        for i in range(len(ids)):
            for j in range(i + 1, len(ids)):
                u, v = ids[i], ids[j]
                if G.has_edge(u, v):
                    G[u][v]["weight"] += 1
                else:
                    G.add_edge(u, v, weight=1)
    return G
