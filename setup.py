"""Setup file for project"""


from setuptools import setup, find_packages

with open("README.md", 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name                            = "cmap-client",
    version                         = "0.1.0",
    description                     = "Python client for the Simons CMAP oceanographic database",
    long_description                = long_description,
    long_description_content_type   = "text/markdown",
    packages                        = find_packages(include=["cmap_client", "cmap_client.*"]),
    install_requires                = [
        "requests>=2.28",
        "pandas>=1.5",
        "python-dotenv>=1.0",
        "colorama>=0.4.6",
    ],
    extras_require                  = {
        "test": ["pytest>=7", "numpy"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Oceanography",
    ],
    python_requires=">=3.10",           # Minimum Python version
)
