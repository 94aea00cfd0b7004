""" This file contains defines parameters for elnetpath that we use to fill
settings in setup.py and the top-level docstring.
"""

CLASSIFIERS = ["Development Status :: 3 - Alpha",
               "Environment :: Console",
               "Intended Audience :: Science/Research",
               "License :: OSI Approved :: BSD License",
               "Operating System :: OS Independent",
               "Programming Language :: Python",
               "Programming Language :: Python :: 3",
               "Topic :: Scientific/Engineering"]

description  = 'Parallel elastic net regularization path search'

__version__ = '0.1.0'

# versions
NUMPY_MIN_VERSION = '1.22'
SCIPY_MIN_VERSION = '1.8'
PANDAS_MIN_VERSION = '1.4'
SKLEARN_MIN_VERSION = '1.1'
JOBLIB_MIN_VERSION = '1.1'
MATPLOTLIB_MIN_VERSION = '3.3.3'

NAME                = 'elnetpath'
MAINTAINER          = ""
MAINTAINER_EMAIL    = ""
DESCRIPTION         = description
LONG_DESCRIPTION    = description
URL                 = ""
DOWNLOAD_URL        = ""
LICENSE             = "BSD license"
CLASSIFIERS         = CLASSIFIERS
AUTHOR              = ""
AUTHOR_EMAIL        = ""
PLATFORMS           = "OS Independent"
STATUS              = 'alpha'
PROVIDES            = []
REQUIRES            = ["numpy>=%s" % NUMPY_MIN_VERSION,
                       "scipy>=%s" % SCIPY_MIN_VERSION,
                       "pandas>=%s" % PANDAS_MIN_VERSION,
                       "scikit-learn>=%s" % SKLEARN_MIN_VERSION,
                       "joblib>=%s" % JOBLIB_MIN_VERSION,
                       "matplotlib>=%s" % MATPLOTLIB_MIN_VERSION,
                       "tqdm",
                       "typer",
                       ]
