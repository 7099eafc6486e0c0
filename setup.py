from setuptools import setup, find_packages

setup(
	name="tick-tcp-client",
	version="0.1.0",
	description="Bidirectional TCP client for hosts that poll once per frame",
	packages=find_packages(where="src"),
	package_dir={"": "src"},
	python_requires=">=3.10",
	install_requires=[
		"pyyaml>=6.0",
	],
	extras_require={
		"dev": [
			"pytest>=7.4.0",
			"black>=23.0.0",
			"flake8>=6.0.0",
		],
	},
	classifiers=[
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"License :: OSI Approved :: MIT License",
		"Programming Language :: Python :: 3.10",
		"Topic :: System :: Networking",
	],
)
