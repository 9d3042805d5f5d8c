from setuptools import setup, find_packages

setup(
    name='gitlanes',
    version='0.1',
    description='Incremental commit graph layout for Git repositories',
    author='Iliyas Jorio',
    classifiers=[
        'Topic :: Software Development :: Version Control :: Git',
        'Intended Audience :: Developers',
    ],
    packages=find_packages(include=['gitlanes', 'gitlanes.*']),
    entry_points={
        'console_scripts': ['gitlanes=gitlanes.__main__:main']
    },
    python_requires='>= 3.11',
    install_requires=[
        'pygit2 >= 1.14',
        'pyqt6',
    ],
    extras_require={
        'pyqt5': ['pyqt5'],
        'pyside6': ['PySide6 !=6.4.0, !=6.4.0.1, !=6.5.1'],
        'memory-usage': ['psutil'],
        'test': ['pytest', 'pytest-qt'],
    },
)
