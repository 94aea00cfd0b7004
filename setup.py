import os

# BEFORE importing distutils, remove MANIFEST. distutils doesn't properly
# update it when the contents of directories change.
if os.path.exists('MANIFEST'): os.remove('MANIFEST')

from setuptools import setup

# Get version and release info, which is all stored in elnetpath/info.py
ver_file = os.path.join('elnetpath', 'info.py')
info = {}
with open(ver_file) as f:
    exec(f.read(), info)

# get long_description

long_description = open('README.md', 'rt', encoding='utf-8').read()
long_description_content_type = 'text/markdown'

def main(**extra_args):
    setup(name=info['NAME'],
          version=info['__version__'],
          description=info['DESCRIPTION'],
          license=info['LICENSE'],
          classifiers=info['CLASSIFIERS'],
          platforms=info['PLATFORMS'],
          packages = ['elnetpath'],
          python_requires='>=3.8',
          install_requires=info['REQUIRES'],
          extras_require={'test': ['pytest']},
          entry_points={'console_scripts': ['elnetpath=elnetpath.cli:app']},
          include_package_data=True,
          data_files=[],
          scripts=[],
          long_description=long_description,
          long_description_content_type=long_description_content_type,
          **extra_args
         )

#simple way to test what setup will do
#python setup.py install --prefix=/tmp
if __name__ == "__main__":
    main()
