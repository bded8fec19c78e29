"""Simple example clustering generated data with the Lloyd k-means engine.

Compares random-row and percentile initialization on the same data.
"""

import numpy as np
import sys
import os

# Add current directory to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from kmeans import KMeans, KMeansError
from kmeans.datagen import generate_rows


def simple_example():
    """Simple example demonstrating K-means usage."""
    print("🎯 Simple K-means Example")
    print("=" * 50)

    X = generate_rows(2000, 4, random_state=42)
    print(f"Using {X.shape[0]} samples with {X.shape[1]} features")

    for init in ("random", "percentile"):
        print(f"\nFitting K-means with k=8, init={init}...")
        try:
            kmeans = KMeans(n_clusters=8, init=init, random_state=42).fit(X)
        except KMeansError as e:
            print(f"❌ {e.describe()}")
            continue

        info = kmeans.get_cluster_info()
        print(f"\nResults:")
        print(f"  Final inertia: {info['inertia']:.2f}")
        print(f"  Iterations: {info['n_iterations']} (converged: {info['converged']})")
        print(f"  Largest cluster: {info['max_cluster_size']}")
        print(f"  Smallest cluster: {info['min_cluster_size']}")
        print(f"  Empty clusters: {info['empty_clusters']}")

        queries = generate_rows(100, 4, random_state=7)
        predicted_labels = kmeans.predict(queries)
        print(f"Label distribution on new data: {np.bincount(predicted_labels, minlength=8)}")

    print("\n✅ Example completed successfully!")


if __name__ == "__main__":
    simple_example()
