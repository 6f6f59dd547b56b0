#
# N-dimensional simplex noise, vectorised with numpy.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se), using the
# rank ordering method from 2012 to find the simplex containing each point.
#
import numpy
import itertools


# returns floor of floating point array by coercing to integer
def fastfloor(x):
    return numpy.array(numpy.floor(x), dtype=numpy.int64)


def _gradients(N):
    # edge and corner directions of the N-cube
    grad = ((0,-1,1),)*N
    grad = numpy.array(list(itertools.product(*grad))[1:])
    return grad[numpy.abs(grad).sum(-1) >= N-1]


class SimplexNoise:
    '''
    Seeded simplex noise over points of any dimension.

    Each instance owns its permutation table, so instances with different
    seeds can be created and sampled from different threads without
    touching numpy's global random state. Values are clipped to [-1,1].
    '''
    def __init__(self, seed=None):
        rng = numpy.random.RandomState(None if seed is None else seed % 2**32)
        p = rng.permutation(256)
        # To remove the need for index wrapping, double the permutation table length
        self.perm = numpy.concatenate((p, p))
        self.seed = seed
        self._grad = {}

    def _grad_for(self, N):
        grad = self._grad.get(N)
        if grad is None:
            grad = self._grad.setdefault(N, _gradients(N))
        return grad

    def noise(self, Z):
        Z = numpy.asarray(Z, dtype=numpy.float64)
        if Z.ndim == 1:
            Z = Z[numpy.newaxis, :]
        N = Z.shape[-1] #number of dimensions
        N1 = N+1 #number of corners of a simplex
        Fn = (N1**0.5 - 1.0)/N
        Gn = (N1 - N1**0.5)/N/N1

        # skew into lattice space; only the hash lookup wraps, the offsets
        # inside the cell are taken from the unwrapped cell origin
        s = Z.sum(-1) * Fn
        cell = fastfloor(Z + s[:,numpy.newaxis])
        t = cell.sum(-1) * Gn
        z0 = Z - (cell - t[:,numpy.newaxis])

        # magnitude ordering of z0 picks the simplex inside the cell
        rank = numpy.zeros(Z.shape, dtype=numpy.int64)
        for l,k in itertools.combinations(range(N),2):
            rank[:,k] += z0[:,k] >= z0[:,l]
            rank[:,l] += z0[:,k] < z0[:,l]

        b = numpy.arange(N1)[:,numpy.newaxis,numpy.newaxis]
        ind = (rank >= N - b).astype(numpy.int64)
        zk = z0 - ind + b * Gn

        grad = self._grad_for(N)
        indi = ind + (cell & 255)
        gik = 0
        for x in range(N-1,-1,-1):
            gik = self.perm[indi[:,:,x] + gik]
        gik = gik % grad.shape[0]

        tk = 0.5 - (zk*zk).sum(-1)
        tp = tk >= 0
        tk = tp * tk * tk
        nk = tp * tk * tk * (grad[gik]*zk).sum(-1)
        return numpy.clip(nk.sum(0) * 2**6, -1.0, 1.0)

    def noise3(self, x, y, z):
        return float(self.noise(numpy.array([[x, y, z]], dtype=numpy.float64))[0])


class BrownianNoise:
    '''
    Fractal (brownian) sum of octaves of a base noise. The sum is divided by
    the total amplitude, so the result stays within the base noise's range.
    '''
    def __init__(self, base, octaves=2, lacunarity=2.0, persistence=0.5):
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        self.base = base
        self.octaves = octaves
        self.lacunarity = lacunarity
        self.persistence = persistence
        self._amplitudes = [persistence**o for o in range(octaves)]
        self._frequencies = [lacunarity**o for o in range(octaves)]
        self._scale = 1.0 / sum(self._amplitudes)

    def noise(self, Z):
        Z = numpy.asarray(Z, dtype=numpy.float64)
        total = 0.0
        for amp, freq in zip(self._amplitudes, self._frequencies):
            total = total + self.base.noise(Z * freq) * amp
        return numpy.clip(total * self._scale, -1.0, 1.0)

    def noise3(self, x, y, z):
        return float(self.noise(numpy.array([[x, y, z]], dtype=numpy.float64))[0])
