from typing import Dict, List, Sequence

import matplotlib.pyplot as plt

from seating_models import GenerationRecord, Table


# --- Visualization ---
def plot_convergence(history: Sequence[GenerationRecord], show: bool = False):
    fig, ax = plt.subplots()
    generations = [r.generation for r in history]
    ax.plot(generations, [r.best_fitness for r in history], label="Best Fitness")
    ax.plot(generations, [r.avg_fitness for r in history], label="Avg Fitness")
    ax.set_xlabel("Generation")
    ax.set_ylabel("Fitness")
    ax.set_ylim(0, 1.05)
    ax.set_title("Seating Optimizer Convergence")
    ax.legend()
    ax.grid(True)
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_tables(groups: Dict[str, List[str]], tables: Sequence[Table], show: bool = False):
    fig, ax = plt.subplots(figsize=(8, 5))
    y_offset = 1
    for i, table in enumerate(tables):
        seated = groups.get(table.id, [])
        ax.text(-1, -i * y_offset, f"{table.name or table.id} ({len(seated)}/{table.capacity})",
                ha='right', fontweight='bold')
        for j, name in enumerate(seated):
            ax.text(j, -i * y_offset, name, bbox=dict(facecolor='lightblue', edgecolor='black'), ha='center')
        if len(seated) > 1:
            ax.plot([0, len(seated) - 1], [-i * y_offset, -i * y_offset], 'k--', lw=1)
    widest = max((len(groups.get(t.id, [])) for t in tables), default=1)
    ax.set_xlim(-4, max(widest, 1))
    ax.set_ylim(-y_offset * len(tables), 1)
    ax.axis('off')
    ax.set_title("Seating Arrangement")
    fig.tight_layout()
    if show:
        plt.show()
    return fig
