import numpy as np

from ftwt.network import AssociativeNetwork
from ftwt.problems import SIMPLE_CROSS_SYNAPSES
from ftwt.recorder import TrainingRecorder
from ftwt.visualization import Visualization


def main():
    # 1. Build the 4-neuron cross network
    net = AssociativeNetwork(4, 1, SIMPLE_CROSS_SYNAPSES, learn_rate=0.01, name="Simple 2x2 Net")

    # 2. Recorder & visualization
    recorder = TrainingRecorder()
    viz = Visualization()

    # 3. Training loop: 0 -> 3 and 1 -> 2
    step = 0
    for _ in range(10):
        for pre, post in (([(0, 1.0)], [(3, 1.0)]), ([(1, 1.0)], [(2, 1.0)])):
            net.train_step([pre], [post])
            step += 1
            recorder.record(step, net)

    # 4. Query and report
    out1 = net.apply_input(np.array([1.0, 0.0, 0.0, 0.0]))
    out2 = net.apply_input(np.array([0.0, 1.0, 0.0, 0.0]))
    print(net.format(max_entries=None))
    print("input 0 ->", out1)
    print("input 1 ->", out2)

    # 5. Save statistics and plot
    recorder.save("simple_cross_history.npz")
    viz.plot_synapse_matrix(net.synapses)
    viz.plot_training_history(recorder)


if __name__ == "__main__":
    main()
