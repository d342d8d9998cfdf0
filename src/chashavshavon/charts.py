# src/chashavshavon/charts.py

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from chashavshavon.models import Entry


def create_haflaga_chart(entries: list[Entry], filename: str, subtitle: str = None):
    """
    Erstellt ein Liniendiagramm der Haflagas und speichert es als PNG.
    :param entries: Die echten Entries in chronologischer Reihenfolge (Haflagas schon berechnet).
    :param filename: Pfad zur Ausgabedatei, z.B. "haflagas.png".
    :param subtitle: (Optional) Text, der unter das Diagramm geschrieben wird.
    """
    points = [(e.date.to_pydate(), e.haflaga) for e in entries if e.haflaga]
    # Wenn keine Haflaga da ist, lege ein kleines Platzhalter‐Bild an
    if not points:
        fig, ax = plt.subplots()
        ax.text(0.5, 0.5, "Keine Daten", ha="center", va="center", fontsize=14)
        ax.axis("off")
        if subtitle:
            fig.text(0.5, 0.02, subtitle, ha="center", va="bottom", fontsize=12)
        fig.savefig(filename, bbox_inches="tight")
        plt.close(fig)
        return

    days = [p[0] for p in points]
    haflagas = [p[1] for p in points]
    fig, ax = plt.subplots()
    ax.plot(days, haflagas, marker="o")
    ax.set_ylabel("Haflaga (Tage)")
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate()
    if subtitle:
        fig.text(0.5, 0.02, subtitle, ha="center", va="bottom", fontsize=12)
    fig.savefig(filename, bbox_inches="tight")
    plt.close(fig)
