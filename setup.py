from setuptools import setup, find_packages

setup(
    name='fullGPy',
    version='0.1.0',
    license='GNU General Public License v3 (GPLv3)',
    description='Python implementation of dense Gaussian Process regression with likelihood-based hyperparameter learning',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'examples']),
    install_requires=[
        "numpy>=1.19.0",
        "scipy>=1.6.0",
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
