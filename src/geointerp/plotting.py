import matplotlib.pyplot as plt
import numpy as np

from .samples import SampleSet


def plot_surface(X, Y, Z, samples: SampleSet = None, title="Interpolated surface",
                 label="Prediction", path=None, cmap="viridis"):
    """
    Heatmap of a predicted grid with the sample points on top.
    Saves to `path` when given; returns the figure.
    """
    fig, ax = plt.subplots(figsize=(8, 6))
    im = ax.pcolormesh(X, Y, Z, shading="auto", cmap=cmap)

    if samples is not None and len(samples):
        coords = samples.coordinates
        ax.scatter(coords[:, 0], coords[:, 1], c=samples.values, cmap=cmap,
                   norm=im.norm, edgecolor="black", s=40)

    fig.colorbar(im, ax=ax, label=label)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(title)

    if path is not None:
        fig.savefig(path)
    return fig


def plot_observed_vs_predicted(observed, predicted, title="Observed vs predicted", path=None):
    observed = np.asarray(observed, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(observed, predicted, s=20)
    lo = float(min(observed.min(), predicted.min()))
    hi = float(max(observed.max(), predicted.max()))
    ax.plot([lo, hi], [lo, hi], "k--", linewidth=1)
    ax.set_xlabel("Observed")
    ax.set_ylabel("Predicted")
    ax.set_title(title)

    if path is not None:
        fig.savefig(path)
    return fig
