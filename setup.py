#!/usr/bin/env python
from setuptools import setup
import os


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, 'src', 'psd2json', 'version.py')
    with open(filename, 'rb') as fp:
        return fp.read().decode('utf8').split('=')[1].strip(" \n'\"")


def readme():
    with open('README.rst') as f:
        return f.read()


setup(
    name='psd2json',
    version=get_version(),
    description='Convert PSD layers to CSS-in-JS style records',
    long_description=readme(),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Multimedia :: Graphics',
        'Topic :: Multimedia :: Graphics :: Graphics Conversion',
    ],
    keywords='photoshop psd css json',
    license='MIT License',
    package_dir={'': 'src'},
    packages=[
        'psd2json',
        'psd2json.core',
    ],
    python_requires='>=3.10',
    install_requires=[
        'pillow',
        'numpy',
        'psd-tools>=1.9',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': ['psd2json=psd2json.__main__:main']
    },
)
